from .config import ConfigParser, Profile, ProfileRegistry, parse, parse_file
from .engine import ConplugEngine
from .errors import ConplugError, CyclicInheritanceError, Diagnostic, ErrorCode, ParseError
from .matcher import PatternMatcher
from .render import FileSize, RenderOptions, RenderResult, Renderer, render
from .resolver import ProfileResolver, resolve
from .selection import Selection, SelectionMode, SelectionStore
from .settings import Settings, load_settings, settings

__all__ = [
    "ConfigParser",
    "Profile",
    "ProfileRegistry",
    "parse",
    "parse_file",
    "ConplugEngine",
    "ConplugError",
    "CyclicInheritanceError",
    "Diagnostic",
    "ErrorCode",
    "ParseError",
    "PatternMatcher",
    "FileSize",
    "RenderOptions",
    "RenderResult",
    "Renderer",
    "render",
    "ProfileResolver",
    "resolve",
    "Selection",
    "SelectionMode",
    "SelectionStore",
    "Settings",
    "load_settings",
    "settings",
]
