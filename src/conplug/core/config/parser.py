"""
Parser for `.conplug` profile files.

The format is line oriented::

    # comment
    base {
        src/
        README.md
    }
    web: base, assets {
        **/*.{ts,tsx}
        !**/*.test.ts
    }
    tiny{main.py setup.cfg}

A header line opens a block, `}` closes it, and every other line inside a
block is an include pattern, or an exclude pattern when it starts with `!`.
Profile names cannot contain glob characters, `!` or path separators, so a
brace glob such as `**/*.{ts,tsx}` is never taken for a header. Malformed
lines never fail the parse; they are read as patterns (inside a
block) or skipped (outside one).
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from conplug.core.config.profiles import Profile
from conplug.core.errors import ParseError
from conplug.core.utils.logging import get_logger

logger = get_logger("conplug.config.parser")

_HEADER_RE = re.compile(r"^([^:{}*?\[\]/\\!]+)(?::([^{]*))?\{(.*)$")


class _State(Enum):
    OUTSIDE_BLOCK = "outside-block"
    INSIDE_BLOCK = "inside-block"


@dataclass
class _Block:
    name: str
    root_path: str
    parents: List[str] = field(default_factory=list)
    include_patterns: List[str] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=list)

    def add_pattern(self, pattern: str) -> None:
        if pattern.startswith("!"):
            excluded = pattern[1:].strip()
            if excluded:
                self.exclude_patterns.append(excluded)
        elif pattern:
            self.include_patterns.append(pattern)

    def freeze(self) -> Profile:
        return Profile(
            name=self.name,
            root_path=self.root_path,
            parents=tuple(self.parents),
            include_patterns=tuple(self.include_patterns),
            exclude_patterns=tuple(self.exclude_patterns),
        )


class ConfigParser:
    """Two-state line scanner (outside-block / inside-block)."""

    def __init__(self, root_path: str):
        self.root_path = root_path
        self._state = _State.OUTSIDE_BLOCK
        self._block: Optional[_Block] = None
        self._profiles: Dict[str, Profile] = {}

    def parse(self, text: str) -> Dict[str, Profile]:
        for raw in text.splitlines():
            self._feed(raw.strip())
        self._commit()
        return self._profiles

    def _feed(self, line: str) -> None:
        if not line or line.startswith("#"):
            return

        header = _HEADER_RE.match(line)
        if header:
            self._open(header.group(1), header.group(2), header.group(3))
            return

        if self._state is _State.OUTSIDE_BLOCK:
            return

        if line == "}":
            self._commit()
            return

        self._block.add_pattern(line)

    def _open(self, raw_name: str, raw_parents: Optional[str], rest: str) -> None:
        # No nesting: a new header commits the open block.
        self._commit()
        name = raw_name.strip()
        parents = []
        for parent in (raw_parents or "").split(","):
            parent = parent.strip()
            if not parent:
                continue
            if parent == name:
                logger.warning("self_parent_dropped", profile=name, root=self.root_path)
                continue
            parents.append(parent)
        self._block = _Block(name=name, root_path=self.root_path, parents=parents)
        self._state = _State.INSIDE_BLOCK

        body = rest.strip()
        closes = body.endswith("}")
        if closes:
            body = body[:-1]
        for token in body.split():
            self._block.add_pattern(token)
        if closes:
            self._commit()

    def _commit(self) -> None:
        if self._block is not None:
            if self._block.name in self._profiles:
                logger.debug("profile_redeclared", profile=self._block.name, root=self.root_path)
            self._profiles[self._block.name] = self._block.freeze()
        self._block = None
        self._state = _State.OUTSIDE_BLOCK


def parse(text: str, root_path: str) -> Dict[str, Profile]:
    """Parse profile definitions declared under `root_path`."""
    return ConfigParser(root_path).parse(text)


def parse_file(path: str, root_path: str) -> Dict[str, Profile]:
    """Read and parse a config file; I/O and decode failures raise ParseError."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(str(path), str(e)) from e
    return parse(text, root_path)
