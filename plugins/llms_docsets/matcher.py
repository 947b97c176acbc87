import functools
import re
from typing import Iterable, Pattern


@functools.lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> Pattern:
    """
    Translate a glob into a regex over page paths.

    `*` and `?` stay inside one path segment, `**` crosses `/`, and a
    `**/` that starts a segment may also match zero directories.
    `[...]` and `[!...]` are character classes.
    """
    out = []
    i, n = 0, len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            if j - i == 1:
                out.append("[^/]*")
            elif j < n and pattern[j] == "/" and (i == 0 or pattern[i - 1] == "/"):
                out.append("(?:.*/)?")
                j += 1
            else:
                out.append(".*")
            i = j
        elif ch == "?":
            out.append("[^/]")
            i += 1
        elif ch == "[":
            end = pattern.find("]", i + 2 if pattern[i + 1 : i + 2] in ("!", "]") else i + 1)
            if end == -1:
                out.append(re.escape(ch))
                i += 1
                continue
            body = pattern[i + 1 : end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^" + body[1:]
            elif body.startswith("^"):
                body = "\\" + body
            out.append(f"[{body}]")
            i = end + 1
        else:
            out.append(re.escape(ch))
            i += 1
    return re.compile("".join(out) + r"\Z")


def match_pattern(path: str, pattern: str) -> bool:
    """Match a page path against one glob; a leading `!` negates it."""
    if pattern.startswith("!"):
        return not match_pattern(path, pattern[1:])
    return compile_pattern(pattern).match(path) is not None


def matches(path: str, patterns: Iterable[str]) -> bool:
    """Return True if `path` matches at least one pattern. No patterns, no match."""
    return any(match_pattern(path, pattern) for pattern in patterns or ())


def first_match(path: str, patterns: Iterable[str]) -> int:
    """Index of the first pattern matching `path`, or -1."""
    for idx, pattern in enumerate(patterns or ()):
        if match_pattern(path, pattern):
            return idx
    return -1
