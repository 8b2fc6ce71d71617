# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Serializes a BMGraph back into the bmgraph format.

``write_sorted`` produces the canonical form: reading it back and writing
it again yields the same text.
"""
import logging
from typing import Iterable, List, Optional, Set, TextIO

from .entities import Edge, Node
from .graph import BMGraph

logger = logging.getLogger(__name__)

class BMGraphWriter:
    def __init__(
        self,
        graph: BMGraph,
        stream: TextIO,
        ignored_node_attributes: Optional[Iterable[str]] = None,
        ignored_edge_attributes: Optional[Iterable[str]] = None,
    ):
        self.graph = graph
        self.stream = stream
        self.ignored_node_attributes: Set[str] = set(ignored_node_attributes or ())
        self.ignored_edge_attributes: Set[str] = set(ignored_edge_attributes or ())

    def ignore_node_attribute(self, *names: str) -> None:
        self.ignored_node_attributes.update(names)

    def ignore_edge_attribute(self, *names: str) -> None:
        self.ignored_edge_attributes.update(names)

    def unignore_node_attribute(self, *names: str) -> None:
        self.ignored_node_attributes.difference_update(names)

    def unignore_edge_attribute(self, *names: str) -> None:
        self.ignored_edge_attributes.difference_update(names)

    def write(self, comments: bool = True) -> None:
        """Write in insertion order."""
        graph = self.graph
        lines = graph.special_comment_strings()
        if comments:
            lines += graph.comments
        self._write_graph(
            nodes=list(graph.nodes),
            edges=list(graph.edges),
            comments=lines,
            special_nodes=list(graph.special_nodes),
            group_nodes=list(graph.group_nodes),
        )

    def write_sorted(self, comments: bool = False, canonize_edges: bool = False) -> None:
        """
        Write in canonical order.

        Args:
            comments: Include regular comments (special comments are always written).
            canonize_edges: Write every edge in its canonical direction
                instead of the direction it was declared in.
        """
        graph = self.graph
        lines = set(graph.special_comment_strings())
        if comments:
            lines.update(graph.comments)
        edges = graph.edges
        if canonize_edges:
            edges = [edge.canonical_direction() for edge in edges]
        self._write_graph(
            nodes=sorted(graph.nodes),
            edges=sorted(edges),
            comments=sorted(lines),
            special_nodes=sorted(graph.special_nodes),
            group_nodes=sorted(graph.group_nodes),
        )

    def _line(self, text: str) -> None:
        self.stream.write(text)
        self.stream.write("\n")

    def _write_graph(self, nodes: List[Node], edges: List[Edge], comments: List[str],
                     special_nodes: List[Node], group_nodes: List[Node]) -> None:
        graph = self.graph
        all_members: Set[Node] = set()

        for comment in comments:
            self._line(f"# {comment}")

        db = graph.database
        if db[0] is not None:
            fields = [db[0]]
            for value in db[1:]:
                if value is None:
                    break
                fields.append(value)
            self._line("# _database " + " ".join(fields))

        for node in special_nodes:
            self._line(str(node))

        for group in group_nodes:
            members = sorted(graph.members_of(group) or ())
            if not members:
                continue
            all_members.update(members)
            ids = ",".join(member.dbid for member in members)
            self._line(f"# _group {group} {len(members)} {members[0].type} {ids}")

        linktypes = {edge.linktype for edge in graph.edges} & graph.linktype_definitions()
        for linktype in sorted(linktypes):
            reverse = graph.reverse_name(linktype)
            if reverse == linktype:
                self._line(f"# _symmetric {linktype}")
            elif reverse != "-" + linktype:
                self._line(f"# _reverse {linktype} {reverse}")

        for edge in edges:
            self._line(str(edge) + edge.attributes_to_string(self.ignored_edge_attributes))

        for edge in graph.group_member_edges():
            self._line("# _edge " + str(edge)
                       + edge.attributes_to_string(self.ignored_edge_attributes))

        for node in nodes:
            attributes = node.attributes_to_string(self.ignored_node_attributes)
            if attributes or graph.degree(node) == 0:
                self._line(f"# _attributes {node}{attributes}")
        for node in sorted(all_members):
            attributes = node.attributes_to_string(self.ignored_node_attributes)
            if attributes:
                self._line(f"# _attributes {node}{attributes}")

        logger.debug(f"Wrote {len(nodes)} nodes and {len(edges)} edges")
