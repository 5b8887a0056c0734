"""
Annotated concatenation of resolved files.

Each file is emitted as ``prefix + header + suffix + content + "\\n\\n"``
where the header is ``File: <root-relative path>`` wrapped in the comment
syntax of the file's extension. When the next chunk would push the output
past ``max_content_bytes``, rendering switches to a manifest listing every
requested file with its size instead.
"""
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from conplug.core.errors import Diagnostic, ErrorCode, report
from conplug.core.settings import DEFAULT_COMMENT_MAP
from conplug.core.utils.logging import get_logger
from conplug.core.utils.path_trie import PathTrie, relative_to_root

logger = get_logger("conplug.render")

MARKUP_EXTENSIONS = {".html", ".xml", ".svg", ".jsx", ".tsx"}
STYLESHEET_EXTENSIONS = {".css", ".scss", ".less"}
CHUNK_SEPARATOR = "\n\n"


class RenderOptions(BaseModel):
    model_config = ConfigDict(frozen=True)
    header_prefix: str = "\n"
    header_suffix: str = "\n"
    max_content_bytes: int = 1024 * 1024
    comment_style_for: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COMMENT_MAP))
    roots: List[str] = Field(default_factory=list)

    @classmethod
    def from_settings(cls, settings_obj, roots: Sequence[str] = ()) -> "RenderOptions":
        return cls(
            header_prefix=settings_obj.HEADER_PREFIX,
            header_suffix=settings_obj.HEADER_SUFFIX,
            max_content_bytes=settings_obj.MAX_CONTENT_BYTES,
            comment_style_for=dict(settings_obj.LANGUAGE_COMMENT_MAP),
            roots=list(roots),
        )

    def comment_marker(self, path: str) -> str:
        ext = os.path.splitext(path)[1].lower()
        if ext in self.comment_style_for:
            return self.comment_style_for[ext]
        return self.comment_style_for.get("default") or "//"

    def header_for(self, path: str, rel_path: str) -> str:
        ext = os.path.splitext(path)[1].lower()
        if ext in MARKUP_EXTENSIONS:
            header = f"<!-- File: {rel_path} -->"
        elif ext in STYLESHEET_EXTENSIONS:
            header = f"/* File: {rel_path} */"
        else:
            header = f"{self.comment_marker(path)} File: {rel_path}"
        return f"{self.header_prefix}{header}{self.header_suffix}"


@dataclass(frozen=True)
class FileSize:
    path: str
    rel_path: str
    size: int


@dataclass
class RenderResult:
    content: str = ""
    truncated: bool = False
    manifest: Optional[str] = None
    files_rendered: List[str] = field(default_factory=list)
    total_bytes: int = 0
    potential_bytes: int = 0
    largest_file: Optional[FileSize] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def track(self, entry: FileSize) -> None:
        if self.largest_file is None or entry.size > self.largest_file.size:
            self.largest_file = entry


class Renderer:
    def __init__(self, options: Optional[RenderOptions] = None):
        self.options = options or RenderOptions()
        self._roots = PathTrie()
        for root in self.options.roots:
            self._roots.insert(root)

    def relative_path(self, path: str) -> str:
        """Path relative to the most specific root containing it, else unchanged."""
        return relative_to_root(path, self._roots.find_most_specific_prefix(path))

    def render(self, files: Iterable[str]) -> RenderResult:
        requested = list(files)
        result = RenderResult()
        budget = self.options.max_content_bytes
        chunks: List[str] = []

        for path in requested:
            rel = self.relative_path(path)
            try:
                st = os.stat(path)
                if not stat.S_ISREG(st.st_mode):
                    raise IsADirectoryError(f"not a regular file: {path}")
            except OSError as e:
                self._read_failed(result, path, e)
                continue

            header = self.options.header_for(path, rel)
            # Replacement characters only grow the text, so this is a lower bound.
            floor = len(header.encode("utf-8")) + st.st_size + len(CHUNK_SEPARATOR)
            if result.total_bytes + floor > budget:
                result.truncated = True
                break

            try:
                data = Path(path).read_bytes()
            except OSError as e:
                self._read_failed(result, path, e)
                continue
            result.track(FileSize(path=path, rel_path=rel, size=len(data)))

            chunk = f"{header}{data.decode('utf-8', errors='replace')}{CHUNK_SEPARATOR}"
            chunk_size = len(chunk.encode("utf-8"))
            if result.total_bytes + chunk_size > budget:
                result.truncated = True
                break
            chunks.append(chunk)
            result.total_bytes += chunk_size
            result.files_rendered.append(path)

        if result.truncated:
            logger.warning("size_limit_exceeded", max_content_bytes=budget, files=len(requested))
            report(result.diagnostics, ErrorCode.SIZE_LIMIT_EXCEEDED,
                   f"Maximum content size ({budget} bytes) exceeded. Generating file list instead.")
            result.manifest = self.build_manifest(requested, result)
            result.content = result.manifest
            result.files_rendered = []
            result.total_bytes = 0
        else:
            result.content = "".join(chunks)
        return result

    def build_manifest(self, files: Sequence[str], result: Optional[RenderResult] = None) -> str:
        lines = [
            f"Maximum content size ({self.options.max_content_bytes} bytes) exceeded.",
            "",
            "List of files that would have been included:",
            "",
        ]
        total = 0
        for path in files:
            try:
                size = os.stat(path).st_size
            except OSError as e:
                lines.append(f"- {path} (Error reading size: {e.strerror or e})")
                continue
            rel = self.relative_path(path)
            total += size
            lines.append(f"- {rel} ({size} bytes)")
            if result is not None:
                result.track(FileSize(path=path, rel_path=rel, size=size))
        if result is not None:
            result.potential_bytes = total
        return "\n".join(lines) + f"\n\nTotal potential size: {total} bytes"

    @staticmethod
    def _read_failed(result: RenderResult, path: str, error: OSError) -> None:
        logger.warning("file_read_failed", path=path, error=str(error))
        report(result.diagnostics, ErrorCode.FILE_READ_FAILURE,
               f"Error reading file {path}: {error}", path=path)


def render(files: Iterable[str], options: Optional[RenderOptions] = None) -> RenderResult:
    return Renderer(options).render(files)
