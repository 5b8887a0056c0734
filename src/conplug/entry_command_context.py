import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from conplug.core.workspace import WorkspaceManager


@dataclass
class CommandContext:
    cwd: Path | str | None = None
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)
    stdin: TextIO = field(default_factory=lambda: sys.stdin)

    def __post_init__(self) -> None:
        if self.cwd is None:
            self.cwd = Path.cwd()
        else:
            self.cwd = Path(self.cwd)

    def normalize_path(self, path: str) -> str:
        p = Path(path).expanduser()
        if not p.is_absolute():
            p = Path(self.cwd) / p
        return WorkspaceManager.normalize_path(str(p))

    def print_json(self, payload: dict | list) -> None:
        print(json.dumps(payload, ensure_ascii=False, indent=2), file=self.stdout)

    def print_line(self, text: str) -> None:
        print(text, file=self.stdout)

    def write(self, text: str) -> None:
        self.stdout.write(text)

    def print_err(self, text: str) -> None:
        print(text, file=self.stderr)

    def confirm(self, prompt: str) -> bool:
        print(f"{prompt} [y/N] ", end="", file=self.stderr, flush=True)
        answer = self.stdin.readline()
        return answer.strip().lower() in {"y", "yes"}
