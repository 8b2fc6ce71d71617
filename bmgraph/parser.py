# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Recursive-descent parser for the bmgraph line format.

The parser only recognises syntax; what the lines mean is left to a
``ParserCallback``. Every callback returns True to continue or False to
abort the parse. Rule methods return None after reporting an error, the
rest of that line is then skipped without any callback firing for it.

Grammar, one entity per line::

    Type_dbid                                  special node
    Type_dbid Type_dbid [linktype [k=v ...]]   edge ("+" = no link type)
    # text                                     comment
    # _keyword ...                             special comment
    % ...                                      ignored
"""
import logging
from typing import BinaryIO, Dict, List, Optional

from .config import DEFAULT_CONFIG, BMGraphConfig
from .entities import NO_LINKTYPE
from .errors import ParserBusyError
from .escape import unescape
from .lexer import Lexer
from .tokens import Token, TokenKind

logger = logging.getLogger(__name__)

class ParserCallback:
    """Receives parsed lines. The defaults accept and ignore everything."""

    def error(self, message: str, source: str, line: int, column: int) -> bool:
        return True

    def special_node(self, node: Token) -> bool:
        return True

    def edge(self, from_node: Token, to_node: Token, linktype: Optional[Token],
             attributes: Optional[Dict[str, str]], add_attributes: bool) -> bool:
        """``add_attributes`` is set for ``# _edge`` lines."""
        return True

    def node_attributes(self, node: Token, attributes: Dict[str, str]) -> bool:
        return True

    def node_group(self, group: Token, members: List[Token]) -> bool:
        return True

    def reverse_linktype(self, forward: Token, reverse: Token) -> bool:
        return True

    def symmetric_linktype(self, linktype: Token) -> bool:
        return True

    def database(self, name: Token, version: Optional[Token],
                 server: Optional[Token], url: Optional[Token]) -> bool:
        return True

    def node_expand_url(self, url: Token) -> bool:
        return True

    def node_expand_program(self, program: Token) -> bool:
        return True

    def special_comment(self, keyword: Token, content: str) -> bool:
        return True

    def comment(self, comment: Token) -> bool:
        return True

class Parser:
    def __init__(self, callback: ParserCallback, config: Optional[BMGraphConfig] = None):
        self.callback = callback
        self.config = config or DEFAULT_CONFIG
        self.success = True
        self.aborted = False
        self._source: Optional[str] = None
        self._lexer: Optional[Lexer] = None
        self._pool: Optional[Dict[str, str]] = None
        self._line_ok = True

    @property
    def busy(self) -> bool:
        return self._lexer is not None

    def parse(self, stream: BinaryIO, source_name: Optional[str] = None) -> bool:
        """Parse a whole stream. Returns True iff no errors were reported."""
        if self.busy:
            raise ParserBusyError(f"Parser is already parsing {self._source}")
        self.success = True
        self.aborted = False
        self._source = source_name or self.config.default_source_name
        self._lexer = Lexer(stream, self._lexer_error, self.config.max_token_length)
        self._pool = {}
        try:
            self._parse_graph()
        finally:
            if self.aborted:
                logger.info(f"Parsing of {self._source} aborted by callback")
            self._source = None
            self._lexer = None
            self._pool = None
        return self.success

    def parse_file(self, path) -> bool:
        if self.busy:
            raise ParserBusyError(f"Parser is already parsing {self._source}")
        try:
            stream = open(path, "rb")
        except OSError as e:
            self.success = False
            self.callback.error(str(e), str(path), 0, 0)
            return False
        with stream:
            return self.parse(stream, str(path))

    # Error reporting

    def _lexer_error(self, message: str, line: int, column: int) -> None:
        self.success = False
        self.callback.error(message, self._source, line, column)

    def _error(self, message: str) -> None:
        self.success = False
        self._line_ok = False
        if not self.callback.error(message, self._source,
                                   self._lexer.line, self._lexer.column):
            self.aborted = True

    def _expected(self, what: str) -> None:
        self._error(f"{what} expected, got {self._lexer.peek()}")

    def _notify(self, proceed: bool) -> None:
        if not proceed:
            self.aborted = True

    # Token helpers

    def _take(self) -> Token:
        token = self._lexer.next()
        token.source = self._source
        return token

    def _match(self, kind: TokenKind) -> Optional[Token]:
        if self._lexer.peek().kind is kind:
            return self._take()
        self._expected(kind.name)
        return None

    def _match_line_end(self) -> bool:
        if self._lexer.at_line_end():
            return True
        self._expected(TokenKind.NEWLINE.name)
        return False

    def _skip_separator(self) -> bool:
        """Group lines accept a space or a colon between fields."""
        if self._lexer.peek().kind is TokenKind.SPACE:
            self._lexer.next()
            return True
        return self._match(TokenKind.COLON) is not None

    def _identifier_until(self, endmark: TokenKind,
                          endmark2: TokenKind = TokenKind.SPACE) -> Optional[Token]:
        """Merge tokens into one identifier up to an end mark or whitespace."""
        lex = self._lexer
        if lex.peek().kind.is_space:
            self._expected("Start of an identifier")
            return None
        identifier = self._take()
        identifier.make_identifier()
        kind = lex.peek().kind
        while kind is not endmark and kind is not endmark2 and not kind.is_space:
            identifier.text = identifier.text + lex.next().text
            kind = lex.peek().kind
        return identifier

    def _intern(self, token: Token) -> None:
        token.text = self._pool.setdefault(token.text, token.text)

    def _parse_int(self) -> Optional[int]:
        token = self._match(TokenKind.IDENTIFIER)
        if token is None:
            return None
        try:
            return int(token.text)
        except ValueError:
            self._error(f"An integer expected, got {token}")
            return None

    def _parse_float(self) -> Optional[float]:
        token = self._match(TokenKind.IDENTIFIER)
        if token is None:
            return None
        try:
            return float(token.text)
        except ValueError:
            self._error(f"A number expected, got {token}")
            return None

    # Lines

    def _parse_graph(self) -> None:
        lex = self._lexer
        while not self.aborted:
            self._line_ok = True
            kind = lex.peek().kind
            if kind is TokenKind.EOF:
                return
            if kind is TokenKind.NEWLINE:
                lex.next()
                continue
            if kind is TokenKind.IDENTIFIER:
                self._parse_node_or_edge()
            elif kind is TokenKind.HASH:
                self._parse_comment()
            elif kind is TokenKind.PERCENT:
                # Legacy GraphViz directive
                lex.skip_to_line_end()
            else:
                self._expected("Node identifier or a comment")
            if not self._line_ok and not self.aborted:
                lex.skip_to_line_end()

    def _parse_node_or_edge(self) -> None:
        node = self._parse_node(TokenKind.SPACE)
        if node is None:
            return
        if self._lexer.at_line_end():
            self._notify(self.callback.special_node(node))
            return
        self._parse_edge(node, False)

    def _parse_node(self, endmark: TokenKind) -> Optional[Token]:
        """``type _ dbid``, merged into a token carrying type/dbid (and db/id)."""
        node = self._identifier_until(TokenKind.UNDERSCORE)
        if node is None or self._match(TokenKind.UNDERSCORE) is None:
            return None
        dbid = self._parse_dbid(endmark)
        if dbid is None:
            return None
        self._intern(node)
        node.put("type", node.text)
        for key, value in (dbid.attributes or {}).items():
            node.put(key, value)
        node.put("dbid", dbid.text)
        node.text = f"{node.text}_{dbid.text}"
        return node

    def _parse_dbid(self, endmark: TokenKind) -> Optional[Token]:
        lex = self._lexer
        db = self._identifier_until(TokenKind.COLON, endmark)
        if db is None:
            return None
        self._intern(db)
        if lex.peek().kind is endmark:
            return db
        if lex.peek().kind is TokenKind.COLON:
            lex.next()
            kind = lex.peek().kind
            if kind is not endmark and not kind.is_space:
                id_ = self._identifier_until(endmark)
                self._intern(id_)
                db.put("db", db.text)
                db.put("id", id_.text)
                db.text = f"{db.text}:{id_.text}"
        return db

    def _parse_edge(self, node_a: Token, add_attributes: bool) -> None:
        lex = self._lexer
        if self._match(TokenKind.SPACE) is None:
            return
        node_b = self._parse_node(TokenKind.SPACE)
        if node_b is None:
            return
        linktype = None
        attributes = None
        if not lex.at_line_end():
            if self._match(TokenKind.SPACE) is None:
                return
            linktype = self._identifier_until(TokenKind.SPACE)
            if linktype is None:
                return
            if linktype.text == NO_LINKTYPE:
                linktype = None
            else:
                self._intern(linktype)
            attributes = {}
            if not self._parse_attributes(attributes):
                return
            attributes = attributes or None
        self._notify(self.callback.edge(node_a, node_b, linktype, attributes, add_attributes))

    def _parse_attributes(self, attributes: Dict[str, str]) -> bool:
        """Space separated ``key=value`` pairs up to the end of line."""
        lex = self._lexer
        while not lex.at_line_end():
            if self._match(TokenKind.SPACE) is None:
                return False
            if lex.at_line_end():
                break
            key = self._identifier_until(TokenKind.EQUALS)
            if key is None or self._match(TokenKind.EQUALS) is None:
                return False
            value = self._identifier_until(TokenKind.SPACE)
            if value is None:
                return False
            for token in (key, value):
                text = unescape(token.text)
                token.make_text()
                token.text = text
                self._intern(token)
            attributes[key.text] = value.text
        return True

    def _parse_comment(self) -> None:
        lex = self._lexer
        self._match(TokenKind.HASH)
        if lex.peek().kind is TokenKind.SPACE:
            lex.next()
        if lex.peek().kind is TokenKind.UNDERSCORE:
            lex.next()
            if lex.peek().kind is TokenKind.IDENTIFIER:
                self._parse_special_comment()
            else:
                self._expected("Special comment keyword")
            return
        comment = lex.read_to_line_end()
        if comment is not None:
            comment.source = self._source
            self._notify(self.callback.comment(comment))

    def _parse_special_comment(self) -> None:
        keyword = self._identifier_until(TokenKind.SPACE)
        handler = {
            "attributes": self._parse_node_attributes,
            "edge": self._parse_edge_attributes,
            "group": self._parse_group,
            "reverse": self._parse_reverse,
            "symmetric": self._parse_symmetric,
            "canvas": self._parse_canvas,
            "database": self._parse_database,
            "node_expand_url": self._parse_node_expand_url,
            "node_expand_program": self._parse_node_expand_program,
        }.get(keyword.text)
        if handler is not None:
            handler(keyword)
        else:
            if self._lexer.peek().kind is TokenKind.SPACE:
                self._lexer.next()
            content = self._lexer.read_to_line_end()
            self._notify(self.callback.special_comment(
                keyword, "" if content is None else content.text))
        if self._line_ok and not self.aborted:
            self._match_line_end()

    def _parse_node_attributes(self, keyword: Token) -> None:
        if self._match(TokenKind.SPACE) is None:
            return
        node = self._parse_node(TokenKind.SPACE)
        if node is None:
            return
        attributes: Dict[str, str] = {}
        if not self._parse_attributes(attributes):
            return
        self._notify(self.callback.node_attributes(node, attributes))

    def _parse_edge_attributes(self, keyword: Token) -> None:
        if self._match(TokenKind.SPACE) is None:
            return
        node = self._parse_node(TokenKind.SPACE)
        if node is None:
            return
        self._parse_edge(node, True)

    def _parse_group(self, keyword: Token) -> None:
        """``# _group Group_id count MemberType id1,id2,...``"""
        if self._match(TokenKind.SPACE) is None:
            return
        group = self._parse_node(TokenKind.COLON)
        if group is None or not self._skip_separator():
            return
        count = self._parse_int()
        if count is None or not self._skip_separator():
            return
        member_type = self._identifier_until(TokenKind.COLON)
        if member_type is None or not self._skip_separator():
            return
        members = self._parse_member_list(member_type)
        if members is None:
            return
        if len(members) != count:
            self._error(f"{count} nodes expected, got {len(members)}")
            return
        self._notify(self.callback.node_group(group, members))
        self._lexer.skip_to_line_end()

    def _parse_member_list(self, member_type: Token) -> Optional[List[Token]]:
        lex = self._lexer
        self._intern(member_type)
        members = []
        while True:
            dbid = self._parse_dbid(TokenKind.COMMA)
            if dbid is None:
                return None
            dbid.put("type", member_type.text)
            dbid.put("dbid", dbid.text)
            dbid.text = f"{member_type.text}_{dbid.text}"
            self._intern(dbid)
            members.append(dbid)
            if lex.peek().kind is TokenKind.COMMA:
                lex.next()
            if lex.peek().kind.is_space:
                return members

    def _parse_reverse(self, keyword: Token) -> None:
        if self._match(TokenKind.SPACE) is None:
            return
        forward = self._identifier_until(TokenKind.SPACE)
        if forward is None or self._match(TokenKind.SPACE) is None:
            return
        reverse = self._identifier_until(TokenKind.NEWLINE)
        if reverse is None or not self._match_line_end():
            return
        self._notify(self.callback.reverse_linktype(forward, reverse))

    def _parse_symmetric(self, keyword: Token) -> None:
        if self._match(TokenKind.SPACE) is None:
            return
        linktype = self._identifier_until(TokenKind.SPACE)
        if linktype is None or not self._match_line_end():
            return
        self._notify(self.callback.symmetric_linktype(linktype))

    def _parse_canvas(self, keyword: Token) -> None:
        """``# _canvas left,top,right,bottom``, passed on as a special comment."""
        if self._match(TokenKind.SPACE) is None:
            return
        values = []
        for i in range(4):
            if i and self._match(TokenKind.COMMA) is None:
                return
            value = self._parse_float()
            if value is None:
                return
            values.append(str(value))
        if not self._match_line_end():
            return
        self._notify(self.callback.special_comment(keyword, ",".join(values)))

    def _parse_database(self, keyword: Token) -> None:
        """``# _database name [version [server [url]]]``; anything after is ignored."""
        lex = self._lexer
        if self._match(TokenKind.SPACE) is None:
            return
        name = self._identifier_until(TokenKind.SPACE)
        if name is None:
            return
        fields: List[Optional[Token]] = []
        while len(fields) < 3 and not lex.at_line_end():
            if self._match(TokenKind.SPACE) is None:
                return
            if lex.at_line_end():
                break
            field = self._identifier_until(TokenKind.SPACE)
            if field is None:
                return
            fields.append(field)
        lex.skip_to_line_end()
        fields += [None] * (3 - len(fields))
        self._notify(self.callback.database(name, *fields))

    def _parse_node_expand_url(self, keyword: Token) -> None:
        if self._match(TokenKind.SPACE) is None:
            return
        url = self._identifier_until(TokenKind.SPACE, TokenKind.NEWLINE)
        if url is None:
            return
        self._lexer.skip_to_line_end()
        self._notify(self.callback.node_expand_url(url))

    def _parse_node_expand_program(self, keyword: Token) -> None:
        if self._match(TokenKind.SPACE) is None:
            return
        program = self._identifier_until(TokenKind.SPACE, TokenKind.NEWLINE)
        if program is None:
            return
        self._lexer.skip_to_line_end()
        self._notify(self.callback.node_expand_program(program))
