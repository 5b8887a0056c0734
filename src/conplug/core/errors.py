from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence


class ErrorCode(str, Enum):
    """Failure kinds the engine reports to its host."""
    CONFIG_PARSE_FAILURE = "config_parse_failure"
    PATTERN_EXPANSION_FAILURE = "pattern_expansion_failure"
    UNKNOWN_PROFILE_REFERENCE = "unknown_profile_reference"
    CYCLIC_INHERITANCE = "cyclic_inheritance"
    FILE_READ_FAILURE = "file_read_failure"
    SIZE_LIMIT_EXCEEDED = "size_limit_exceeded"


class ConplugError(RuntimeError):
    def __init__(self, code: ErrorCode, message: str, hint: str = ""):
        super().__init__(message)
        self.code = code
        self.message = message
        self.hint = hint


class ParseError(ConplugError):
    def __init__(self, path: str, reason: str):
        super().__init__(
            ErrorCode.CONFIG_PARSE_FAILURE,
            f"Error parsing config file {path}: {reason}",
            hint="Check that the file exists, is readable and is UTF-8 encoded.",
        )
        self.path = path
        self.reason = reason


class CyclicInheritanceError(ConplugError):
    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(
            ErrorCode.CYCLIC_INHERITANCE,
            f"Profile inheritance cycle: {' -> '.join(self.chain)}",
            hint="Remove one of the parent references in the cycle.",
        )


@dataclass(frozen=True)
class Diagnostic:
    kind: ErrorCode
    message: str
    path: Optional[str] = None
    profile: Optional[str] = None

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


def report(diagnostics: Optional[List[Diagnostic]], kind: ErrorCode, message: str,
           path: Optional[str] = None, profile: Optional[str] = None) -> None:
    """Append a diagnostic when the caller asked for them."""
    if diagnostics is None:
        return
    diagnostics.append(Diagnostic(kind=kind, message=message, path=path, profile=profile))
