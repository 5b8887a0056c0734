import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from conplug.version import __version__

DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    "**/node_modules/**",
    "**/.git/**",
    "**/out/**",
    "**/dist/**",
    "**/build/**",
    "**/.vscode/**",
    "**/package-lock.json",
    "**/yarn.lock",
    "**/*.log",
]

DEFAULT_COMMENT_MAP: Dict[str, str] = {
    ".sh": "#",
    ".bash": "#",
    ".zsh": "#",
    ".py": "#",
    ".rb": "#",
    ".pl": "#",
    ".pm": "#",
    ".yml": "#",
    ".yaml": "#",
    ".toml": "#",
    ".conf": "#",
    ".ini": "#",
    ".cfg": "#",
    ".sql": "--",
    ".lua": "--",
    "default": "//",
}

# Editor-style keys accepted in settings files.
_CAMEL_KEYS: Dict[str, str] = {
    "includeGitIgnored": "INCLUDE_GIT_IGNORED",
    "autoCopyToClipboard": "AUTO_COPY_TO_CLIPBOARD",
    "headerPrefix": "HEADER_PREFIX",
    "headerSuffix": "HEADER_SUFFIX",
    "fileDecorationSymbol": "FILE_DECORATION_SYMBOL",
    "excludePatterns": "EXCLUDE_PATTERNS",
    "languageCommentMap": "LANGUAGE_COMMENT_MAP",
    "maxContentSize": "MAX_CONTENT_BYTES",
    "maxContentBytes": "MAX_CONTENT_BYTES",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CONPLUG_",
        case_sensitive=True,
        extra="ignore"
    )

    VERSION: str = __version__

    # --- RESOLUTION ---
    CONFIG_FILE_NAME: str = ".conplug"
    IGNORE_FILE_NAME: str = ".gitignore"
    INCLUDE_GIT_IGNORED: bool = False
    EXCLUDE_PATTERNS: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))

    # --- RENDERING ---
    HEADER_PREFIX: str = "\n"
    HEADER_SUFFIX: str = "\n"
    LANGUAGE_COMMENT_MAP: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COMMENT_MAP))
    MAX_CONTENT_BYTES: int = 1024 * 1024  # 1MB

    # --- LOGGING ---
    LOG_LEVEL: str = "WARNING"
    LOG_JSON: bool = True

    # --- HOST ONLY ---
    AUTO_COPY_TO_CLIPBOARD: bool = True
    FILE_DECORATION_SYMBOL: str = "\U0001F43A"
    STATE_DIR: str = str(Path.home() / ".local" / "share" / "conplug")

    @property
    def selection_path(self) -> Path:
        return Path(self.STATE_DIR) / "selection.json"


def _normalize_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in data.items():
        name = key[len("conplug."):] if key.startswith("conplug.") else key
        name = _CAMEL_KEYS.get(name, name)
        if name.upper() in Settings.model_fields:
            out[name.upper()] = value
    return out


def load_settings(path: Optional[str] = None, **overrides: Any) -> Settings:
    """
    Build settings from defaults, environment, an optional JSON file and
    explicit overrides (later wins).
    """
    data: Dict[str, Any] = {}
    if path:
        cfg_path = Path(path).expanduser()
        try:
            raw = json.loads(cfg_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ValueError(f"Failed to load settings file {cfg_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid settings shape at {cfg_path}: expected JSON object.")
        data.update(_normalize_keys(raw))
    data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)


settings = Settings()
