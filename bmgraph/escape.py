# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
import re
from typing import Optional

_ESCAPED = re.compile(r"\\\\|\\n|\\t|%2B|\+")

_DECODE = {
    "\\\\": "\\",
    "\\n": "\n",
    "\\t": " ",
    "%2B": "+",
    "+": " ",
}

def unescape(s: Optional[str]) -> str:
    """
    Decode an attribute key or value as stored in a bmgraph file.
    - '+' -> space
    - '%2B' -> '+'
    - '\\n' -> newline
    - '\\t' -> space (tabs are not preserved)
    - '\\\\' -> backslash

    Decoding is a single left-to-right pass, so an escaped backslash
    followed by 'n' stays a backslash and an 'n'.
    """
    if s is None:
        return ""
    return _ESCAPED.sub(lambda m: _DECODE[m.group(0)], s)

def escape(s: Optional[str]) -> str:
    """Encode a string so that it survives as a single bmgraph identifier."""
    if s is None:
        return ""
    s = s.replace("\\", "\\\\")
    s = s.replace("+", "%2B")
    s = s.replace("\n", "\\n")
    s = s.replace("\r", "")
    s = s.replace("\t", "+")
    s = s.replace("\f", "+")
    s = s.replace(" ", "+")
    return s
