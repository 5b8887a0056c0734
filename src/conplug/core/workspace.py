import os
from pathlib import Path
from typing import Iterable, List, Optional


class WorkspaceManager:
    """Root path normalization and per-root config file locations."""

    @staticmethod
    def _strip_trailing_sep(path: str) -> str:
        if not path:
            return path
        stripped = path.rstrip(os.sep)
        # Keep filesystem root stable ("/" on POSIX).
        if not stripped:
            return os.sep
        return stripped

    @staticmethod
    def normalize_path(p: str) -> str:
        """Absolute, symlink-resolved path without a trailing separator."""
        if not p:
            p = os.getcwd()
        try:
            resolved = str(Path(p).expanduser().resolve())
            return WorkspaceManager._strip_trailing_sep(resolved)
        except (OSError, RuntimeError):
            res = os.path.abspath(os.path.expanduser(p))
            return WorkspaceManager._strip_trailing_sep(res)

    @staticmethod
    def normalize_roots(roots: Optional[Iterable[str]], default: Optional[str] = None) -> List[str]:
        """Normalize and deduplicate roots, preserving order; defaults to `default` or cwd."""
        normalized = [WorkspaceManager.normalize_path(r) for r in (roots or []) if r]
        return list(dict.fromkeys(normalized)) or [WorkspaceManager.normalize_path(default or os.getcwd())]

    @staticmethod
    def config_path(root_path: str, file_name: str) -> Path:
        return Path(root_path) / file_name

    @staticmethod
    def has_config(root_path: str, file_name: str) -> bool:
        return WorkspaceManager.config_path(root_path, file_name).is_file()
