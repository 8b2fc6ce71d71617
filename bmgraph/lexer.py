# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
import logging
from typing import BinaryIO, Callable, List, Optional

from .config import MAX_TOKEN_LENGTH
from .tokens import Token, TokenKind

logger = logging.getLogger(__name__)

ErrorFn = Callable[[str, int, int], None]

_NL = ord("\n")
_CR = ord("\r")

# Bytes starting a run of whitespace (CR only continues one)
_SPACE_START = {ord(" "), ord("\t"), ord("\f")}
_SPACE_CONTINUE = _SPACE_START | {_CR}

_SINGLES = {
    ord("_"): TokenKind.UNDERSCORE,
    ord(":"): TokenKind.COLON,
    ord(","): TokenKind.COMMA,
    ord("="): TokenKind.EQUALS,
    ord("%"): TokenKind.PERCENT,
    ord("#"): TokenKind.HASH,
}

# '#' and '%' do not end an identifier: "a%2Bb" is one token
_IDENTIFIER_END = _SPACE_CONTINUE | {_NL, ord("_"), ord("="), ord(":"), ord(",")}

def _is_continuation(c: int) -> bool:
    return c & 0xC0 == 0x80

def _partial_tail(buf: bytearray) -> int:
    """Number of trailing bytes forming an incomplete UTF-8 sequence."""
    for i in range(1, min(4, len(buf)) + 1):
        c = buf[-i]
        if _is_continuation(c):
            continue
        if c < 0xC0:
            return 0
        needed = 2 if c < 0xE0 else 3 if c < 0xF0 else 4
        return i if i < needed else 0
    return 0

class Lexer:
    """
    Splits a byte stream into bmgraph tokens with one token of lookahead.

    Columns count characters since the last newline and lines count newlines
    since the start of the stream, both starting from 1.
    """

    def __init__(
        self,
        stream: BinaryIO,
        error: Optional[ErrorFn] = None,
        max_token_length: int = MAX_TOKEN_LENGTH,
    ):
        self._stream = stream
        self._error_fn = error
        self._max = max_token_length
        self._pushback: List[int] = []
        self._token: Optional[Token] = None
        self._line = 1
        self._column = 1

    def peek(self) -> Token:
        """Return the next token without consuming it."""
        if self._token is None:
            self._token = self._read_token()
        return self._token

    def next(self) -> Token:
        token = self.peek()
        self._token = None
        return token

    @property
    def line(self) -> int:
        return self.peek().line

    @property
    def column(self) -> int:
        return self.peek().column

    def at_line_end(self) -> bool:
        return self.peek().kind in (TokenKind.NEWLINE, TokenKind.EOF)

    def read_to_line_end(self) -> Optional[Token]:
        """
        Consume everything up to (not including) the end of line as one
        TEXT token. Returns None if already at the end of a line.
        """
        token = self.peek()
        if self.at_line_end():
            return None

        buf = bytearray()
        while True:
            c = self._read_byte()
            if c is None or c == _NL:
                self._unread_byte(c)
                break
            buf.append(c)
            if len(buf) >= self._max:
                self._error("Line too long")
                self._hold_back_partial(buf)
                break
        if buf.endswith(b"\r"):
            del buf[-1]

        self._token = None
        return Token(TokenKind.TEXT, token.text + self._decode(buf),
                     token.line, token.column)

    def skip_to_line_end(self) -> None:
        """
        Discard input up to the end of line. Does nothing when already at
        the end of a line; the NEWLINE token itself is never consumed.
        """
        if self.at_line_end():
            return
        c = self._read_byte()
        while c is not None and c != _NL:
            c = self._read_byte()
        self._unread_byte(c)
        self._token = None

    def _error(self, message: str) -> None:
        if self._error_fn is not None:
            self._error_fn(message, self._line, self._column)
        else:
            logger.error(f"Lexer error at {self._line}:{self._column}: {message}")

    def _decode(self, buf: bytearray) -> str:
        """Decode UTF-8, reporting malformed input and replacing it."""
        try:
            return buf.decode("utf-8")
        except UnicodeDecodeError:
            self._error("Invalid UTF-8 sequence")
            return buf.decode("utf-8", errors="replace")

    def _hold_back_partial(self, buf: bytearray) -> None:
        """Push an incomplete trailing UTF-8 sequence back for the next token."""
        tail = _partial_tail(buf)
        if 0 < tail < len(buf):
            for c in reversed(buf[-tail:]):
                self._unread_byte(c)
            del buf[-tail:]

    def _read_token(self) -> Token:
        while True:
            column = self._column
            c = self._read_byte()
            if c != _CR:
                break
        line = self._line

        if c is None:
            return Token(TokenKind.EOF, "\x00", line, column)

        if c in _SPACE_START:
            c = self._read_byte()
            while c in _SPACE_CONTINUE:
                c = self._read_byte()
            self._unread_byte(c)
            return Token(TokenKind.SPACE, " ", line, column)

        kind = _SINGLES.get(c)
        if kind is not None:
            return Token(kind, chr(c), line, column)

        if c == _NL:
            self._line += 1
            self._column = 1
            return Token(TokenKind.NEWLINE, "\n", line, column)

        buf = bytearray()
        while True:
            buf.append(c)
            if len(buf) >= self._max:
                self._error("Identifier too long")
                self._hold_back_partial(buf)
                break
            c = self._read_byte()
            if c is None or c in _IDENTIFIER_END:
                self._unread_byte(c)
                break
        return Token(TokenKind.IDENTIFIER, self._decode(buf), line, column)

    def _read_byte(self) -> Optional[int]:
        if self._pushback:
            c = self._pushback.pop()
        else:
            try:
                data = self._stream.read(1)
            except OSError as e:
                self._error(str(e))
                return None
            if not data:
                return None
            c = data[0]
        if not _is_continuation(c):
            self._column += 1
        return c

    def _unread_byte(self, c: Optional[int]) -> None:
        if c is None:
            return
        self._pushback.append(c)
        if not _is_continuation(c):
            self._column -= 1
