import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from conplug.core.utils.globs import translate

_GITIGNORE_CACHE: dict[str, tuple[tuple[int, int], List[str]]] = {}


@dataclass
class _GitignoreRule:
    pattern: str
    regex: re.Pattern
    negated: bool
    anchored: bool
    dir_only: bool


def load_gitignore(root: Path, file_name: str = ".gitignore") -> List[str]:
    gitignore = Path(root) / file_name
    key = str(gitignore)
    try:
        st = gitignore.stat()
    except OSError:
        _GITIGNORE_CACHE.pop(key, None)
        return []
    stamp = (st.st_mtime_ns, st.st_size)
    cached = _GITIGNORE_CACHE.get(key)
    if cached and cached[0] == stamp:
        return list(cached[1])
    try:
        lines = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return []
    _GITIGNORE_CACHE[key] = (stamp, list(lines))
    return lines


def _parse_lines(lines: List[str]) -> List[_GitignoreRule]:
    rules: List[_GitignoreRule] = []
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        if line.startswith(r"\#") or line.startswith(r"\!"):
            line = line[1:]
            negated = False
        elif line.startswith("#"):
            continue
        else:
            negated = line.startswith("!")
            if negated:
                line = line[1:].strip()
        dir_only = line.endswith("/")
        if dir_only:
            line = line.rstrip("/")
        anchored = line.startswith("/") or "/" in line.lstrip("/")
        line = line.lstrip("/")
        if not line:
            continue
        rules.append(_GitignoreRule(
            pattern=line,
            regex=re.compile(translate(line)),
            negated=negated,
            anchored=anchored,
            dir_only=dir_only,
        ))
    return rules


class GitignoreMatcher:
    """Matches root-relative POSIX paths against .gitignore rules."""

    def __init__(self, lines: Optional[List[str]]):
        self._rules = _parse_lines(lines or [])
        self._cache: dict[tuple[str, bool], bool] = {}
        self._cache_order: list[tuple[str, bool]] = []
        self._cache_max = 4096

    def __bool__(self) -> bool:
        return bool(self._rules)

    def _match_rule(self, rule: _GitignoreRule, rel_posix: str, is_dir: bool) -> bool:
        if rule.dir_only and not is_dir:
            return False
        if rule.anchored:
            return rule.regex.match(rel_posix) is not None
        name = rel_posix.rsplit("/", 1)[-1]
        return rule.regex.match(name) is not None

    def is_ignored(self, rel_posix: str, is_dir: bool = False) -> bool:
        key = (str(rel_posix), bool(is_dir))
        cached = self._cache.get(key)
        if cached is not None:
            return bool(cached)
        ignored = False
        for rule in self._rules:
            if self._match_rule(rule, rel_posix, is_dir):
                ignored = not rule.negated
        self._cache[key] = ignored
        self._cache_order.append(key)
        if len(self._cache_order) > self._cache_max:
            stale = self._cache_order.pop(0)
            self._cache.pop(stale, None)
        return ignored

    def is_path_ignored(self, rel_posix: str) -> bool:
        """A file is ignored when it or any of its ancestor directories is."""
        parts = rel_posix.split("/")
        for depth in range(1, len(parts)):
            if self.is_ignored("/".join(parts[:depth]), is_dir=True):
                return True
        return self.is_ignored(rel_posix, is_dir=False)
