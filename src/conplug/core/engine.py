from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from conplug.core.config.parser import parse_file
from conplug.core.config.profiles import Profile
from conplug.core.config.registry import ProfileRegistry
from conplug.core.errors import (
    CyclicInheritanceError,
    Diagnostic,
    ErrorCode,
    ParseError,
    report,
)
from conplug.core.matcher import PatternMatcher
from conplug.core.render import RenderOptions, RenderResult, Renderer
from conplug.core.resolver import ProfileResolver
from conplug.core.selection import Selection
from conplug.core.settings import Settings, settings
from conplug.core.workspace import WorkspaceManager
from conplug.core.utils.logging import get_logger

logger = get_logger("conplug.engine")

SelectionLike = Union[Selection, Iterable[str]]


class ConplugEngine:
    """
    Host-facing entry point: owns the profile registry for a set of roots.

    Every call is synchronous. The engine holds no locks; a host that
    reloads roots from a watcher thread must serialize those reloads with
    resolution calls itself.
    """

    def __init__(self, settings_obj: Optional[Settings] = None, roots: Optional[Iterable[str]] = None):
        self.settings = settings_obj or settings
        self.registry = ProfileRegistry()
        self.matcher = PatternMatcher(
            include_ignored=self.settings.INCLUDE_GIT_IGNORED,
            ignore_file_name=self.settings.IGNORE_FILE_NAME,
        )
        self.resolver = ProfileResolver(self.registry, self.matcher)
        self._roots: List[str] = []
        self._loaded: Set[str] = set()
        for root in roots or []:
            self.add_root(root)

    @property
    def roots(self) -> List[str]:
        return list(self._roots)

    def add_root(self, root_path: str) -> str:
        root = WorkspaceManager.normalize_path(root_path)
        if root not in self._roots:
            self._roots.append(root)
        return root

    def remove_root(self, root_path: str) -> None:
        root = WorkspaceManager.normalize_path(root_path)
        self.invalidate_root(root)
        if root in self._roots:
            self._roots.remove(root)

    def config_path(self, root_path: str) -> Path:
        return WorkspaceManager.config_path(root_path, self.settings.CONFIG_FILE_NAME)

    def has_config(self, root_path: str) -> bool:
        return WorkspaceManager.has_config(root_path, self.settings.CONFIG_FILE_NAME)

    def is_loaded(self, root_path: str) -> bool:
        return WorkspaceManager.normalize_path(root_path) in self._loaded

    def load_root(self, root_path: str, diagnostics: Optional[List[Diagnostic]] = None) -> bool:
        """
        Parse the root's config file and merge its profiles.

        Returns whether a config was found and parsed. Already loaded roots
        are not reparsed until `invalidate_root` is called. On a parse
        failure the root keeps whatever profiles it had before.
        """
        root = self.add_root(root_path)
        if root in self._loaded:
            return True
        cfg_path = self.config_path(root)
        if not self.has_config(root):
            logger.debug("config_missing", root=root, path=str(cfg_path))
            return False
        try:
            profiles = parse_file(str(cfg_path), root)
        except ParseError as e:
            logger.error("config_parse_failed", root=root, path=str(cfg_path), error=e.reason)
            report(diagnostics, ErrorCode.CONFIG_PARSE_FAILURE, e.message, path=str(cfg_path))
            return False
        self.registry.replace_root(root, profiles)
        self._loaded.add(root)
        logger.info("root_loaded", root=root, profiles=len(profiles))
        return True

    def load_all(self, diagnostics: Optional[List[Diagnostic]] = None) -> bool:
        """Load every known root; True when at least one had a config."""
        found = [self.load_root(root, diagnostics) for root in self._roots]
        return any(found)

    def invalidate_root(self, root_path: str) -> None:
        root = WorkspaceManager.normalize_path(root_path)
        self._loaded.discard(root)
        dropped = self.registry.drop_root(root)
        if dropped:
            logger.info("root_invalidated", root=root, profiles=dropped)

    def reload_root(self, root_path: str, diagnostics: Optional[List[Diagnostic]] = None) -> bool:
        """
        Config file changed, created or deleted.

        A deleted config drops the root's profiles. A config that fails to
        parse leaves the previous profiles in place.
        """
        root = self.add_root(root_path)
        self._loaded.discard(root)
        if not self.has_config(root):
            self.invalidate_root(root)
            return False
        return self.load_root(root, diagnostics)

    def list_profile_names(self) -> List[str]:
        return self.registry.names()

    def get_profile(self, name: str) -> Optional[Profile]:
        return self.registry.get(name)

    def resolve_selection(self, selection: SelectionLike,
                          diagnostics: Optional[List[Diagnostic]] = None) -> Set[str]:
        """
        Union of the selected profiles' files.

        All-files mode skips the registry and walks every known root,
        filtered by the configured exclude patterns and ignore rules.
        Unknown profiles and inheritance cycles are reported as diagnostics
        and contribute nothing.
        """
        if not isinstance(selection, Selection):
            selection = Selection.of(selection)

        files: Set[str] = set()
        if selection.is_all_files:
            for root in self._roots:
                files |= self.matcher.all_files(root, self.settings.EXCLUDE_PATTERNS)
            return files

        for name in selection.names:
            profile = self.registry.get(name)
            if profile is None:
                logger.warning("unknown_profile", profile=name)
                report(diagnostics, ErrorCode.UNKNOWN_PROFILE_REFERENCE,
                       f"Profile '{name}' not found", profile=name)
                continue
            try:
                files |= self.resolver.resolve(profile, diagnostics)
            except CyclicInheritanceError as e:
                logger.error("inheritance_cycle", profile=name, chain=e.chain)
                report(diagnostics, ErrorCode.CYCLIC_INHERITANCE, e.message, profile=name)
        return files

    def prune_selection(self, selection: Selection) -> Selection:
        """Drop selected names that no longer exist after a reload."""
        if selection.is_all_files or selection.is_empty:
            return selection
        kept = [n for n in selection.names if n in self.registry]
        if len(kept) != len(selection.names):
            logger.info("selection_pruned", before=list(selection.names), after=kept)
        return Selection.of(kept)

    def render_options(self, **overrides) -> RenderOptions:
        base = RenderOptions.from_settings(self.settings, roots=self._roots)
        return base.model_copy(update=overrides) if overrides else base

    def render(self, files: Iterable[str], options: Optional[RenderOptions] = None) -> RenderResult:
        return Renderer(options or self.render_options()).render(files)

    def describe(self) -> str:
        """Markdown report of roots and loaded profiles."""
        lines = ["# ConPlug Diagnostic Information", ""]
        lines.append("## Profile Information")
        profiles = self.registry.profiles()
        lines.append(f"* Loaded Profiles: {len(profiles)}")
        if profiles:
            lines.extend(["", "### Available Profiles:"])
            for profile in profiles:
                lines.append(f"* {profile.name} (from {profile.root_path})")
                if profile.parents:
                    lines.append(f"  * Inherits from: {', '.join(profile.parents)}")
                lines.append(
                    f"  * Files: {len(profile.include_patterns)}, Excluded: {len(profile.exclude_patterns)}"
                )

        lines.extend(["", "## Workspace Information"])
        if not self._roots:
            lines.append("* No workspace roots")
        else:
            lines.append(f"* Workspace Roots: {len(self._roots)}")
            for index, root in enumerate(self._roots, start=1):
                has_config = self.has_config(root)
                lines.append(f"  * {index}: {Path(root).name} ({root})")
                lines.append(f"    * Has {self.settings.CONFIG_FILE_NAME} file: {'Yes' if has_config else 'No'}")
                lines.append(f"    * Loaded: {'Yes' if self.is_loaded(root) else 'No'}")

        lines.extend([
            "",
            "## Settings",
            f"* Version: {self.settings.VERSION}",
            f"* Include git-ignored files: {self.settings.INCLUDE_GIT_IGNORED}",
            f"* Max content size: {self.settings.MAX_CONTENT_BYTES} bytes",
        ])
        return "\n".join(lines) + "\n"
