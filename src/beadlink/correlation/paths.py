"""Path normalization and small list helpers shared by the correlation engine."""

import re
from typing import List, Pattern, TypeVar

T = TypeVar("T")


def normalize_path(path: str) -> str:
    """Normalize a file path for consistent lookup.

    Back-slashes become forward slashes, leading ``./`` segments and trailing
    slashes are removed. Applying it twice gives the same result as once.

    Example:
        >>> normalize_path("./src\\\\auth/")
        'src/auth'
    """
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.rstrip("/")


def append_unique(items: List[T], item: T) -> List[T]:
    """Return ``items`` with ``item`` appended unless it is already present.

    The input list is not modified and the existing order is kept.
    """
    if item in items:
        return list(items)
    return list(items) + [item]


def compile_glob(pattern: str) -> Pattern[str]:
    """Compile a shell-style glob into a regex matched against whole paths.

    ``*`` matches any run of characters except ``/`` and ``?`` matches one
    character except ``/``. ``[...]`` is a character class and only ``^``
    negates it, so ``[!a]`` is a class of ``!`` and ``a``. Classes, negated
    ones included, can match ``/``. ``\\`` escapes the next character.

    Raises:
        ValueError: If the pattern is malformed (unterminated class, empty
            class, reversed range, trailing escape)
    """
    out: List[str] = []
    i = 0
    n = len(pattern)

    while i < n:
        c = pattern[i]
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "\\":
            if i + 1 >= n:
                raise ValueError(f"trailing escape in pattern {pattern!r}")
            i += 1
            out.append(re.escape(pattern[i]))
        elif c == "[":
            i = _compile_class(pattern, i, out)
        else:
            out.append(re.escape(c))
        i += 1

    return re.compile("".join(out), re.DOTALL)


def _compile_class(pattern: str, start: int, out: List[str]) -> int:
    """Translate the class starting at ``pattern[start] == '['``.

    Returns the index of the closing ``]``.
    """
    n = len(pattern)
    j = start + 1
    negate = False
    if j < n and pattern[j] == "^":
        negate = True
        j += 1

    ranges: List[str] = []
    while True:
        if j >= n:
            raise ValueError(f"unterminated character class in pattern {pattern!r}")
        ch = pattern[j]
        if ch == "]":
            if not ranges:
                raise ValueError(f"empty character class in pattern {pattern!r}")
            break
        if ch == "\\":
            j += 1
            if j >= n:
                raise ValueError(f"trailing escape in pattern {pattern!r}")
            ch = pattern[j]
        lo = ch
        j += 1

        if j + 1 < n and pattern[j] == "-" and pattern[j + 1] != "]":
            j += 1
            hi = pattern[j]
            if hi == "\\":
                j += 1
                if j >= n:
                    raise ValueError(f"trailing escape in pattern {pattern!r}")
                hi = pattern[j]
            j += 1
            if hi < lo:
                raise ValueError(f"bad range {lo}-{hi} in pattern {pattern!r}")
            ranges.append(f"{re.escape(lo)}-{re.escape(hi)}")
        else:
            ranges.append(re.escape(lo))

    body = "".join(ranges)
    out.append(f"[^{body}]" if negate else f"[{body}]")
    return j
