import glob
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set

from conplug.core.errors import Diagnostic, ErrorCode, report
from conplug.core.utils.gitignore import GitignoreMatcher, load_gitignore
from conplug.core.utils.globs import compile_patterns, expand_braces
from conplug.core.utils.logging import get_logger

logger = get_logger("conplug.matcher")


class PatternMatcher:
    """
    Expands include/exclude patterns into absolute file paths under a root.

    A pattern is one of:
      - a directory, marked by a trailing separator: every regular file beneath
        each matching directory ('pkgs/*/' works)
      - a literal path of an existing regular file
      - a glob relative to the root ('**' recursion, '{a,b}' alternatives)

    Wildcards never match hidden entries; literal paths may name them.
    Candidates ignored by the root's ignore file are dropped unless
    `include_ignored` is set. Expansion never raises: an unreadable
    candidate is simply not a match.
    """

    def __init__(self, include_ignored: bool = False, ignore_file_name: str = ".gitignore"):
        self.include_ignored = include_ignored
        self.ignore_file_name = ignore_file_name

    def ignore_filter(self, root_path: str) -> Optional[GitignoreMatcher]:
        if self.include_ignored:
            return None
        lines = load_gitignore(Path(root_path), self.ignore_file_name)
        matcher = GitignoreMatcher(lines)
        return matcher if matcher else None

    def expand(self, patterns: Iterable[str], root_path: str,
               diagnostics: Optional[List[Diagnostic]] = None) -> Set[str]:
        ignore = self.ignore_filter(root_path)
        files: Set[str] = set()
        for pattern in patterns:
            if not pattern:
                continue
            try:
                matched = {
                    path for path in self._candidates(pattern, root_path)
                    if not self._is_ignored(path, root_path, ignore)
                }
            except OSError as e:
                logger.debug("pattern_expansion_failed", pattern=pattern, root=root_path, error=str(e))
                report(diagnostics, ErrorCode.PATTERN_EXPANSION_FAILURE,
                       f"Pattern '{pattern}' could not be expanded: {e}", path=root_path)
                continue
            files.update(matched)
        return files

    def all_files(self, root_path: str, exclude_patterns: Iterable[str] = ()) -> Set[str]:
        """Every non-hidden regular file under the root, minus excludes and ignored files."""
        excludes = [p for p in exclude_patterns if p]
        exclude_regex = compile_patterns(excludes)
        # "X/**" excludes a whole subtree, so matching directories are pruned.
        prune_regex = compile_patterns([p[:-3] for p in excludes if p.endswith("/**")])
        ignore = self.ignore_filter(root_path)

        files: Set[str] = set()
        for path in self._walk(root_path, root_path, ignore, prune_regex):
            rel = self._relative(path, root_path)
            if exclude_regex and exclude_regex.match(rel):
                continue
            files.add(path)
        return files

    def _candidates(self, pattern: str, root_path: str) -> Iterator[str]:
        is_directory = pattern.endswith("/") or pattern.endswith(os.sep)
        # Patterns are always root-relative, even with a leading separator.
        pattern = pattern.lstrip("/" + os.sep)
        base = glob.escape(root_path)

        if is_directory:
            for expanded in expand_braces(pattern):
                yield from self._glob_files(os.path.join(base, expanded, "**", "*"))
            return

        literal = os.path.normpath(os.path.join(root_path, pattern))
        if os.path.isfile(literal):
            yield literal
            return

        for expanded in expand_braces(pattern):
            yield from self._glob_files(os.path.join(base, expanded))

    @staticmethod
    def _glob_files(pattern: str) -> Iterator[str]:
        for match in glob.iglob(pattern, recursive=True):
            if os.path.isfile(match):
                yield os.path.normpath(match)

    def _walk(self, root_path: str, current: str, ignore: Optional[GitignoreMatcher],
              prune_regex) -> Iterator[str]:
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            logger.debug("scandir_failed", path=current, error=str(e))
            return

        for entry in entries:
            if entry.name.startswith("."):
                continue
            path = os.path.normpath(entry.path)
            rel = self._relative(path, root_path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError:
                continue
            if is_dir:
                if prune_regex and prune_regex.match(rel):
                    continue
                if ignore and ignore.is_ignored(rel, is_dir=True):
                    continue
                yield from self._walk(root_path, path, ignore, prune_regex)
            elif is_file:
                if ignore and ignore.is_ignored(rel, is_dir=False):
                    continue
                yield path

    @staticmethod
    def _relative(path: str, root_path: str) -> str:
        try:
            rel = os.path.relpath(path, root_path)
        except ValueError:
            return path.replace(os.sep, "/")
        return rel.replace(os.sep, "/")

    def _is_ignored(self, path: str, root_path: str, ignore: Optional[GitignoreMatcher]) -> bool:
        if ignore is None:
            return False
        rel = self._relative(path, root_path)
        if rel == ".." or rel.startswith("../"):
            # Outside the root: the root's ignore file does not apply.
            return False
        return ignore.is_path_ignored(rel)
