import re
from typing import Iterable, List, Optional

_MAX_BRACE_EXPANSION = 1000


def expand_braces(pattern: str) -> List[str]:
    """
    Expands brace patterns in a glob string.
    For example, "**/*.{js,ts}" becomes ["**/*.js", "**/*.ts"].
    """
    patterns = [pattern]
    while any("{" in p for p in patterns):
        if len(patterns) > _MAX_BRACE_EXPANSION:
            break
        new_patterns = []
        progressed = False
        for p in patterns:
            match = re.search(r"\{([^{}]*,[^{}]*)\}", p)
            if match:
                progressed = True
                prefix = p[:match.start()]
                suffix = p[match.end():]
                for option in match.group(1).split(","):
                    new_patterns.append(f"{prefix}{option}{suffix}")
                    if len(new_patterns) > _MAX_BRACE_EXPANSION:
                        return patterns
            else:
                new_patterns.append(p)
        patterns = new_patterns
        if not progressed:
            # Only literal braces left (no comma inside).
            break
    return patterns


def translate(pattern: str) -> str:
    """
    Translate a glob into a regex over '/'-separated relative paths.

    Unlike fnmatch, '*', '?' and character classes never cross '/'.
    '**' spans directories when it fills a whole path segment.
    """
    i, n = 0, len(pattern)
    out: List[str] = []
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                j = i + 2
                at_segment_start = i == 0 or pattern[i - 1] == "/"
                if at_segment_start and j < n and pattern[j] == "/":
                    out.append("(?:.*/)?")
                    i = j + 1
                    continue
                if at_segment_start and j == n:
                    out.append(".*")
                    i = j
                    continue
                out.append("[^/]*")
                i = j
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1:j]
                if body[0] in "!^":
                    body = "^" + body[1:]
                body = body.replace("\\", "\\\\")
                out.append(f"[{body}]")
                i = j
        elif c == "\\" and i + 1 < n:
            i += 1
            out.append(re.escape(pattern[i]))
        else:
            out.append(re.escape(c))
        i += 1
    return "(?s:" + "".join(out) + r")\Z"


def compile_patterns(patterns: Iterable[str]) -> Optional[re.Pattern]:
    """Compile glob patterns into a single regex, with brace expansion."""
    regex_parts = []
    for pat in patterns:
        if not pat:
            continue
        for expanded in expand_braces(pat):
            regex_parts.append(translate(expanded))
    if not regex_parts:
        return None
    return re.compile("|".join(regex_parts))
