from typing import List, Optional, Set, Tuple

from conplug.core.config.profiles import Profile
from conplug.core.config.registry import ProfileRegistry
from conplug.core.errors import CyclicInheritanceError, Diagnostic, ErrorCode, report
from conplug.core.matcher import PatternMatcher
from conplug.core.utils.logging import get_logger

logger = get_logger("conplug.resolver")


class ProfileResolver:
    """
    Turns a profile and its ancestors into a concrete file set.

    Parents are resolved depth-first in declared order and unioned. A
    profile's own exclusions filter only its own includes: files a parent
    contributed are never removed by a child's `!pattern`. Parents are
    looked up in the profile's own root first, then in the live registry;
    missing parents contribute nothing.
    """

    def __init__(self, registry: ProfileRegistry, matcher: Optional[PatternMatcher] = None):
        self.registry = registry
        self.matcher = matcher or PatternMatcher()

    def resolve(self, profile: Profile, diagnostics: Optional[List[Diagnostic]] = None) -> Set[str]:
        """Raises CyclicInheritanceError when the parent chain loops back on itself."""
        return self._resolve(profile, [], diagnostics)

    def _resolve(self, profile: Profile, chain: List[Tuple[str, str]],
                 diagnostics: Optional[List[Diagnostic]]) -> Set[str]:
        if profile.key in chain:
            names = [name for _root, name in chain[chain.index(profile.key):]] + [profile.name]
            raise CyclicInheritanceError(names)
        chain.append(profile.key)
        try:
            files: Set[str] = set()
            for parent_name in profile.parents:
                parent = self.registry.lookup(parent_name, prefer_root=profile.root_path)
                if parent is None:
                    logger.debug("unknown_parent", profile=profile.name, parent=parent_name)
                    report(diagnostics, ErrorCode.UNKNOWN_PROFILE_REFERENCE,
                           f"Profile '{profile.name}' inherits from unknown profile '{parent_name}'",
                           profile=profile.name)
                    continue
                files |= self._resolve(parent, chain, diagnostics)

            excluded = self.matcher.expand(profile.exclude_patterns, profile.root_path, diagnostics)
            included = self.matcher.expand(profile.include_patterns, profile.root_path, diagnostics)
            files |= included - excluded
            return files
        finally:
            chain.pop()


def resolve(profile: Profile, registry: ProfileRegistry, matcher: Optional[PatternMatcher] = None,
            diagnostics: Optional[List[Diagnostic]] = None) -> Set[str]:
    return ProfileResolver(registry, matcher).resolve(profile, diagnostics)
