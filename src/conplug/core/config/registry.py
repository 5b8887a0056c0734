from typing import Dict, List, Optional

from conplug.core.config.profiles import Profile
from conplug.core.utils.logging import get_logger

logger = get_logger("conplug.config.registry")


class ProfileRegistry:
    """
    Profiles loaded from one or more roots.

    Profiles are stored per root, keyed by (root, name). The live view by
    name is last-loaded-root-wins: when two roots declare the same name, the
    root loaded most recently owns it. Dropping that root lets the other
    root's profile become live again.

    Not thread-safe; the owner serializes reloads and resolution.
    """

    def __init__(self):
        self._by_root: Dict[str, Dict[str, Profile]] = {}
        self._live: Optional[Dict[str, Profile]] = None

    def replace_root(self, root_path: str, profiles: Dict[str, Profile]) -> None:
        """Replace every profile of `root_path`; the root becomes the most recent load."""
        self._by_root.pop(root_path, None)
        self._by_root[root_path] = dict(profiles)
        self._live = None
        shadowed = [n for n in profiles if self._owner_before(root_path, n)]
        if shadowed:
            logger.info("profiles_shadowed", root=root_path, names=shadowed)

    def drop_root(self, root_path: str) -> List[str]:
        """Remove a root's profiles; returns the dropped names."""
        dropped = self._by_root.pop(root_path, None)
        self._live = None
        return list(dropped or {})

    def get(self, name: str) -> Optional[Profile]:
        return self._live_view().get(name)

    def get_scoped(self, root_path: str, name: str) -> Optional[Profile]:
        return self._by_root.get(root_path, {}).get(name)

    def lookup(self, name: str, prefer_root: Optional[str] = None) -> Optional[Profile]:
        """Own-root namespace first, then the live registry."""
        if prefer_root is not None:
            scoped = self.get_scoped(prefer_root, name)
            if scoped is not None:
                return scoped
        return self.get(name)

    def names(self) -> List[str]:
        return list(self._live_view())

    def profiles(self) -> List[Profile]:
        return list(self._live_view().values())

    def __contains__(self, name: object) -> bool:
        return name in self._live_view()

    def _owner_before(self, root_path: str, name: str) -> bool:
        return any(name in profiles for root, profiles in self._by_root.items() if root != root_path)

    def _live_view(self) -> Dict[str, Profile]:
        if self._live is None:
            live: Dict[str, Profile] = {}
            for profiles in self._by_root.values():
                for name, profile in profiles.items():
                    # Keep first-seen position, let later roots win the value.
                    live[name] = profile
            self._live = live
        return self._live
