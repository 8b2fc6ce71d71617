# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Builds a BMGraph from parsed bmgraph lines.

Syntax errors come from the parser; the reader adds the semantic checks
that need the graph (group conflicts, late link-type definitions, ...).
Semantic problems are reported as warnings and the offending line is
ignored; they never affect the parse result.
"""
import io
import logging
import sys
from typing import BinaryIO, Dict, List, Optional, TextIO

import requests

from .config import DEFAULT_CONFIG, BMGraphConfig
from .entities import Edge, Node
from .errors import SpecialCommentError
from .graph import BMGraph
from .parser import Parser, ParserCallback
from .tokens import Token

logger = logging.getLogger(__name__)

class ErrorCallback:
    """Receives errors and warnings found while reading."""

    def on_error(self, message: str, source: str, line: int, column: int) -> bool:
        """Return False to abort reading the current stream."""
        return True

    def on_warning(self, message: str, source: str, line: int, column: int) -> None:
        pass

class StreamErrorCallback(ErrorCallback):
    """Prints ``Error:source:line:column:message`` lines and carries on."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def _print(self, prefix: str, message: str, source: str, line: int, column: int) -> None:
        print(f"{prefix}:{source}:{line}:{column}:{message}",
              file=self.stream if self.stream is not None else sys.stderr)

    def on_error(self, message, source, line, column):
        self._print("Error", message, source, line, column)
        return True

    def on_warning(self, message, source, line, column):
        self._print("Warning", message, source, line, column)

class LoggingErrorCallback(ErrorCallback):
    def on_error(self, message, source, line, column):
        logger.error(f"{source}:{line}:{column}: {message}")
        return True

    def on_warning(self, message, source, line, column):
        logger.warning(f"{source}:{line}:{column}: {message}")

class Reader(ParserCallback):
    """
    Reads one or more bmgraph streams into a single graph.

    Args:
        graph: Graph to add to. A new one is created if None.
        callback: Error reporting, defaults to printing on stderr.
        config: Reader and graph settings.
    """

    def __init__(
        self,
        graph: Optional[BMGraph] = None,
        callback: Optional[ErrorCallback] = None,
        config: Optional[BMGraphConfig] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self._graph = graph if graph is not None else BMGraph(self.config)
        self.errors = callback if callback is not None else StreamErrorCallback()
        self._parser = Parser(self, self.config)
        self._failed = False

    @property
    def graph(self) -> BMGraph:
        return self._graph

    def parse_stream(self, stream: BinaryIO, source_name: Optional[str] = None) -> bool:
        """Read a binary stream. Returns True iff no errors were reported."""
        self._failed = False
        ok = self._parser.parse(stream, source_name)
        self._log_result(source_name)
        return ok and not self._failed

    def parse_file(self, path) -> bool:
        self._failed = False
        ok = self._parser.parse_file(path)
        self._log_result(str(path))
        return ok and not self._failed

    def parse_string(self, text: str, source_name: Optional[str] = None) -> bool:
        return self.parse_stream(io.BytesIO(text.encode("utf-8")), source_name)

    def _log_result(self, source_name: Optional[str]) -> None:
        logger.debug(
            f"Read {source_name or self.config.default_source_name}: "
            f"{self._graph.num_nodes} nodes, {self._graph.num_edges} edges")

    def _error(self, message: str, token: Token) -> bool:
        self._failed = True
        return self.errors.on_error(message, token.source, token.line, token.column)

    def _warn(self, message: str, token: Token) -> None:
        self.errors.on_warning(message, token.source, token.line, token.column)

    # ParserCallback

    def error(self, message, source, line, column):
        return self.errors.on_error(message, source, line, column)

    def special_node(self, node: Token) -> bool:
        n = Node.from_token(node)
        if self._graph.is_group_member(n):
            self._warn("Group member as a special node caused ungrouping", node)
        self._graph.ensure_node(n)
        self._graph.mark_special(n)
        return True

    def edge(self, from_node: Token, to_node: Token, linktype: Optional[Token],
             attributes: Optional[Dict[str, str]], add_attributes: bool) -> bool:
        graph = self._graph
        a = Node.from_token(from_node)
        b = Node.from_token(to_node)
        name = "" if linktype is None else graph.canonical_name(linktype.text)
        if graph.is_canonical_direction(name):
            edge = Edge(a, b, name, attributes)
        else:
            # Symmetric link types always end up here
            edge = Edge(b, a, graph.reverse_name(name), attributes, name)

        if add_attributes:
            if graph.add_edge_attributes(edge, attributes) is None:
                self._warn("Edge attributes for an unknown edge", linktype or from_node)
            return True

        if graph.is_group_member(a):
            self._warn("Member appearing in edge caused ungrouping", from_node)
        if graph.is_group_member(b):
            self._warn("Member appearing in edge caused ungrouping", to_node)
        stored = graph.ensure_edge(edge)
        if stored is None:
            self._warn("Nonsensical edge ignored", from_node)
        elif stored is not edge:
            stored.put_all(attributes)
        return True

    def node_attributes(self, node: Token, attributes: Dict[str, str]) -> bool:
        graph = self._graph
        n = Node.from_token(node)
        if graph.is_group_member(n):
            n = graph.get_group_member(n)
            if n is None:
                self._warn("Attributes for group member node ignored", node)
                return True
        else:
            n = graph.ensure_node(n)
        if n.attributes is None:
            n.attributes = attributes
        else:
            n.attributes.update(attributes)
        return True

    def node_group(self, group: Token, members: List[Token]) -> bool:
        graph = self._graph
        group_node = Node.from_token(group)
        if graph.is_group_member(group_node):
            return self._error("Definition of group member as a group", group)
        if graph.is_group_node(group_node):
            self._warn("Redefinition of node group ignored", group)
            return True
        if not members:
            self._warn("Group definition with no members ignored", group)
            return True

        member_nodes = []
        for token in members:
            member = Node.from_token(token)
            if graph.has_node(member):
                self._warn("Invalid group: member node already in the graph", token)
                return True
            if graph.is_group_member(member):
                self._warn("Invalid group: member already in another group", token)
                return True
            member_nodes.append(member)

        if graph.define_group(group_node, member_nodes) is None:
            self._warn("Conflicting group definition ignored", group)
        return True

    def reverse_linktype(self, forward: Token, reverse: Token) -> bool:
        f, r = forward.text, reverse.text
        if f == r:
            self._warn("Symmetric linktype in reverse definition", reverse)
            return self.symmetric_linktype(forward)
        if self._graph.num_edges > 0 and r != self._graph.reverse_name(f):
            self._warn("Linktype defined after edges encountered", forward)
        self._graph.define_reverse(f, r)
        return True

    def symmetric_linktype(self, linktype: Token) -> bool:
        name = linktype.text
        if self._graph.num_edges > 0 and not self._graph.is_symmetric(name):
            self._warn("Linktype defined after edges encountered", linktype)
        self._graph.define_symmetric(name)
        return True

    def database(self, name: Token, version: Optional[Token],
                 server: Optional[Token], url: Optional[Token]) -> bool:
        """
        Merge into the graph's database descriptor. A different database
        name clears it, conflicting version or server values are dropped.
        """
        db = self._graph.database
        db_version = version.text if version is not None else None
        db_server = server.text if server is not None else None
        if db[0] is not None:
            if db[0] != name.text:
                db[0] = db[1] = db[2] = None
                return True
            if db_version is not None and db[1] is not None and db[1] != db_version:
                db_version = None
            if db_server is not None and db[2] is not None and db[2] != db_server:
                db_server = None
        db[0] = name.text
        db[1] = db_version
        db[2] = db_server
        if url is not None:
            db[3] = url.text
        return True

    def node_expand_url(self, url: Token) -> bool:
        try:
            requests.PreparedRequest().prepare_url(url.text, None)
        except requests.exceptions.RequestException as e:
            return self._error(f"Couldn't parse URL: {e}", url)
        self._graph.node_expand_url = url.text
        return True

    def node_expand_program(self, program: Token) -> bool:
        if len(program.text) < 2:
            self._warn("Curiously short node expand program name", program)
        self._graph.node_expand_program = program.text
        return True

    def special_comment(self, keyword: Token, content: str) -> bool:
        try:
            self._graph.add_special_comment(keyword.text, content.strip())
        except SpecialCommentError as e:
            self._warn(str(e), keyword)
        return True

    def comment(self, comment: Token) -> bool:
        self._graph.add_comment(comment.text)
        return True
