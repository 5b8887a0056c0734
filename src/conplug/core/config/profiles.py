from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Profile:
    name: str
    root_path: str
    parents: Tuple[str, ...] = field(default_factory=tuple)
    include_patterns: Tuple[str, ...] = field(default_factory=tuple)
    exclude_patterns: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.root_path, self.name)
