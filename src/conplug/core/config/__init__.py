from .parser import ConfigParser, parse, parse_file
from .profiles import Profile
from .registry import ProfileRegistry

__all__ = ["ConfigParser", "parse", "parse_file", "Profile", "ProfileRegistry"]
