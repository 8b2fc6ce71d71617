# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Tokens produced by the lexer and reshaped by the parser.

The parser merges several lexer tokens into one (e.g. "Gene", "_",
"EntrezGene", ":", "123" become a single node identifier) and stores
the parsed sub-fields in the token's attribute map. The text of a token
must always match its kind: identifiers never contain whitespace, text
tokens may contain anything.
"""
import enum
import re
from typing import Dict, Optional

class TokenKind(enum.Enum):
    HASH = ("#", False)
    COLON = (":", False)
    COMMA = (",", False)
    SPACE = (" ", True)
    EQUALS = ("=", False)
    NEWLINE = ("\n", True)
    PERCENT = ("%", False)
    UNDERSCORE = ("_", False)
    IDENTIFIER = ("[^ \r\n\f\t]*", False)
    TEXT = (".*", False)
    EOF = ("\x00", True)

    def __init__(self, pattern: str, is_space: bool):
        self.pattern = re.compile("(?:" + pattern + ")", re.DOTALL)
        self.is_space = is_space

    def matches(self, text: str) -> bool:
        return self.pattern.fullmatch(text) is not None

class Token:
    def __init__(
        self,
        kind: TokenKind,
        text: str,
        line: int = -1,
        column: int = -1,
    ):
        """
        Args:
            kind: Token kind.
            text: The token text as it appeared in the source.
            line: Line of occurrence (1-based, -1 if unknown).
            column: Column at which the token starts (1-based, -1 if unknown).
        """
        if not kind.matches(text):
            raise ValueError(f"invalid text {text!r} for token kind {kind.name}")
        self._kind = kind
        self._text = text
        self.line = line
        self.column = column
        self._source: Optional[str] = None
        self.attributes: Optional[Dict[str, str]] = None

    def __repr__(self) -> str:
        return f"Token({self._kind.name}, {self._text!r}, {self.position()})"

    def __str__(self) -> str:
        if self._kind.is_space:
            return self._kind.name
        return self._text

    @property
    def kind(self) -> TokenKind:
        return self._kind

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        if not self._kind.matches(value):
            raise ValueError(f"invalid text {value!r} for token kind {self._kind.name}")
        self._text = value

    @property
    def source(self) -> Optional[str]:
        return self._source

    @source.setter
    def source(self, name: str) -> None:
        if self._source is not None:
            raise ValueError("token source already set")
        self._source = name

    def make_identifier(self) -> None:
        """Drop the special meaning of a punctuation token inside an identifier."""
        if self._kind.is_space or self._kind is TokenKind.TEXT:
            raise ValueError(f"cannot make a {self._kind.name} token into an identifier")
        if not TokenKind.IDENTIFIER.matches(self._text):
            raise ValueError(f"{self._text!r} is not a valid identifier")
        self._kind = TokenKind.IDENTIFIER

    def make_text(self) -> None:
        self._kind = TokenKind.TEXT

    def position(self) -> str:
        return "%s:%s:%s" % (
            self._source or "",
            self.line if self.line >= 0 else "",
            self.column if self.column >= 0 else "",
        )

    def get(self, key: str) -> Optional[str]:
        if self.attributes is None:
            return None
        return self.attributes.get(key)

    def put(self, key: str, value: str) -> Optional[str]:
        if self.attributes is None:
            self.attributes = {}
        previous = self.attributes.get(key)
        self.attributes[key] = value
        return previous

    def remove(self, key: str) -> Optional[str]:
        if self.attributes is None:
            return None
        return self.attributes.pop(key, None)
