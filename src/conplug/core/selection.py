import json
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple

from filelock import FileLock

from conplug.core.utils.logging import get_logger

logger = get_logger("conplug.selection")


class SelectionMode(str, Enum):
    NONE = "none"
    PROFILES = "profiles"
    ALL_FILES = "all_files"


@dataclass(frozen=True)
class Selection:
    """What the host wants resolved: nothing, named profiles, or every file."""
    mode: SelectionMode = SelectionMode.NONE
    names: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def none(cls) -> "Selection":
        return cls()

    @classmethod
    def all_files(cls) -> "Selection":
        return cls(mode=SelectionMode.ALL_FILES)

    @classmethod
    def of(cls, names: Iterable[str]) -> "Selection":
        unique = tuple(dict.fromkeys(n.strip() for n in names if n and n.strip()))
        if not unique:
            return cls.none()
        return cls(mode=SelectionMode.PROFILES, names=unique)

    @property
    def is_empty(self) -> bool:
        return self.mode is SelectionMode.NONE

    @property
    def is_all_files(self) -> bool:
        return self.mode is SelectionMode.ALL_FILES

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": self.mode.value, "names": list(self.names)}

    @classmethod
    def from_dict(cls, data: Any) -> "Selection":
        if not isinstance(data, dict):
            return cls.none()
        try:
            mode = SelectionMode(data.get("mode", SelectionMode.NONE.value))
        except ValueError:
            return cls.none()
        if mode is SelectionMode.ALL_FILES:
            return cls.all_files()
        if mode is SelectionMode.PROFILES:
            names = data.get("names") or []
            if isinstance(names, list):
                return cls.of(str(n) for n in names)
        return cls.none()


class SelectionStore:
    """
    Persists the host's selection as JSON.

    Writes are atomic (temp file + replace) under a FileLock so concurrent
    hosts never observe a half-written file. A missing or corrupt file
    loads as an empty selection.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = FileLock(str(self.path.with_suffix(".json.lock")), timeout=10)

    def load(self) -> Selection:
        if not self.path.exists():
            return Selection.none()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning("selection_unreadable", path=str(self.path), error=str(e))
                return Selection.none()
        return Selection.from_dict(data)

    def save(self, selection: Selection) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            self._atomic_write(selection.to_dict())

    def clear(self) -> None:
        self.save(Selection.none())

    def _atomic_write(self, data: Dict[str, Any]) -> None:
        tmp_path = self.path.parent / f"{self.path.name}.tmp.{os.getpid()}.{int(time.time() * 1000)}"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            try:
                if tmp_path.exists():
                    tmp_path.unlink()
            except OSError:
                pass
            raise
