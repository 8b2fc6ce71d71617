# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
In-memory bmgraph model.

The graph owns every invariant of the format:

- edges are stored once, in the canonical direction of their link type
- a group member is never also a standalone node; touching a member
  directly (as an endpoint, special node or attribute target) ungroups it
- group member edges remember per-member edge attributes seen before
  ungrouping, group edge attributes taking priority

Node and edge instances passed in are stored as-is, so later attribute
changes made through the returned instances are visible in the graph.
"""
import logging
from typing import AbstractSet, Dict, Iterable, List, Optional, Set

from .comments import SpecialComment
from .config import BMGraphConfig, DEFAULT_CONFIG
from .entities import Attributes, Edge, Node
from .linktypes import BUILTIN_REVERSE_LINKTYPES, LinkTypes

logger = logging.getLogger(__name__)

def _merge_attributes(entity, attributes: Optional[Attributes]) -> None:
    if attributes is None:
        return
    if entity.attributes is None:
        entity.attributes = attributes
    else:
        entity.attributes.update(attributes)

class BMGraph:
    def __init__(self, config: Optional[BMGraphConfig] = None):
        config = config or DEFAULT_CONFIG
        self.create_attribute_maps = config.create_attribute_maps
        self.linktypes = LinkTypes()

        self._nodes: Dict[Node, Node] = {}
        self._edges: Dict[Edge, Edge] = {}
        self._node_edges: Dict[Node, List[Edge]] = {}
        self._special: Dict[Node, None] = {}
        # group node -> members, member -> group node
        self._group_members: Dict[Node, List[Node]] = {}
        self._group_of: Dict[Node, Node] = {}
        self._member_edges: Dict[Node, List[Edge]] = {}

        self.comments: List[str] = []
        self._special_comments: Dict[str, SpecialComment] = {}
        # name, version, server, url
        self.database: List[Optional[str]] = [None, None, None, None]
        self.node_expand_url: Optional[str] = None
        self.node_expand_program: Optional[str] = None

    def copy(self) -> "BMGraph":
        """Copy the structure; node and edge instances are shared."""
        other = BMGraph.__new__(BMGraph)
        other.create_attribute_maps = self.create_attribute_maps
        other.linktypes = self.linktypes.copy()
        other._nodes = dict(self._nodes)
        other._edges = dict(self._edges)
        other._node_edges = {n: list(el) for n, el in self._node_edges.items()}
        other._special = dict(self._special)
        other._group_members = {g: list(m) for g, m in self._group_members.items()}
        other._group_of = dict(self._group_of)
        other._member_edges = {n: list(el) for n, el in self._member_edges.items()}
        other.comments = list(self.comments)
        other._special_comments = {}
        other.copy_special_comments_from(self)
        other.database = list(self.database)
        other.node_expand_url = self.node_expand_url
        other.node_expand_program = self.node_expand_program
        return other

    # Nodes

    def resolve_node(self, node: Node) -> Optional[Node]:
        """
        Return the stored standalone instance equal to ``node``, ungrouping
        it first if it is currently a group member. Returns None for a node
        the graph has never seen.
        """
        stored = self._nodes.get(node)
        if stored is None and node in self._group_of:
            stored = self.ungroup_member(node)
        return stored

    def ensure_node(self, node: Node) -> Node:
        """Insert ``node`` unless an equal node exists; return the stored one."""
        stored = self.resolve_node(node)
        if stored is None:
            stored = node
            self._nodes[node] = node
            self._node_edges[node] = []
        if self.create_attribute_maps and stored.attributes is None:
            stored.attributes = {}
        return stored

    def remove_node(self, node: Node) -> Optional[Node]:
        """
        Remove a node with its edges. Removing a group node removes its
        members; removing the last member of a group removes the group.
        """
        for edge in self._member_edges.pop(node, []):
            self._discard_member_edge(edge.other_node(node), edge)

        stored = self._nodes.get(node)
        if stored is None:
            group = self._group_of.pop(node, None)
            if group is None:
                return None
            members = self._group_members[group]
            member = members.pop(members.index(node))
            if not members:
                self.remove_node(group)
            return member

        for edge in self._node_edges.pop(stored):
            other_edges = self._node_edges.get(edge.other_node(stored))
            if other_edges is not None and edge in other_edges:
                other_edges.remove(edge)
            self._edges.pop(edge, None)
        self._special.pop(stored, None)

        for member in self._group_members.pop(stored, []):
            self._group_of.pop(member, None)
            self.remove_node(member)

        del self._nodes[stored]
        return stored

    def get_node(self, node: Node) -> Optional[Node]:
        return self._nodes.get(node)

    def get_node_by_string(self, node_id: str) -> Optional[Node]:
        """Look up ``Type_dbid``. Raises NodeFormatError without an underscore."""
        return self._nodes.get(Node.parse(node_id))

    def has_node(self, node: Node) -> bool:
        return node in self._nodes

    @property
    def nodes(self) -> AbstractSet[Node]:
        return self._nodes.keys()

    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    def node_size(self, node: Node) -> int:
        """Number of members for a group, 1 for a node, 0 for a member, -1 if unknown."""
        if node not in self._nodes:
            return 0 if node in self._group_of else -1
        members = self._group_members.get(node)
        return 1 if members is None else len(members)

    def degree(self, node: Node, linktype: Optional[str] = None,
               dest_type: Optional[str] = None) -> int:
        edges = self._node_edges.get(node)
        if not edges:
            return 0
        if linktype is None and dest_type is None:
            return len(edges)
        count = 0
        for edge in edges:
            if linktype is not None and edge.linktype != linktype:
                continue
            if dest_type is not None and edge.other_node(node).type != dest_type:
                continue
            count += 1
        return count

    def node_edges(self, node: Node) -> List[Edge]:
        return list(self._node_edges.get(node, ()))

    def neighbors(self, node: Node) -> Optional[List[Node]]:
        edges = self._node_edges.get(node)
        if edges is None:
            return None
        return [self._nodes[edge.other_node(node)] for edge in edges]

    # Special nodes

    def mark_special(self, node: Node) -> Optional[Node]:
        stored = self._nodes.get(node)
        if stored is not None:
            self._special.setdefault(stored, None)
        return stored

    def unmark_special(self, node: Node) -> None:
        self._special.pop(node, None)

    def set_special(self, node: Node, special: bool) -> None:
        if special:
            self.mark_special(node)
        else:
            self.unmark_special(node)

    def clear_special_nodes(self) -> None:
        self._special.clear()

    def is_special(self, node: Node) -> bool:
        return node in self._special

    @property
    def special_nodes(self) -> AbstractSet[Node]:
        return self._special.keys()

    # Edges

    def ensure_edge(self, edge: Edge) -> Optional[Edge]:
        """
        Insert ``edge`` unless an equal edge exists; return the stored one.

        Both endpoints are ensured first, which may ungroup them. Returns
        None when ungrouping one endpoint removed the other, e.g. an edge
        between a group and its last member, in either order. A removed
        group is never re-created as a plain node.
        """
        existing = self._edges.get(edge)
        if existing is not None:
            return existing

        groups = [n for n in (edge.from_node, edge.to_node) if n in self._group_members]

        def lost_endpoint() -> bool:
            if any(group not in self._group_members for group in groups):
                logger.debug(f"Edge {edge} lost an endpoint while ungrouping")
                return True
            return False

        from_node = self.ensure_node(edge.from_node)
        if lost_endpoint():
            return None
        to_node = self.ensure_node(edge.to_node)
        if lost_endpoint() or from_node not in self._nodes:
            return None
        edge.set_node_references(from_node, to_node)

        # Ungrouping may have copied an equal group edge already
        existing = self._edges.get(edge)
        if existing is not None:
            return existing

        self._node_edges[from_node].append(edge)
        self._node_edges[to_node].append(edge)
        self._edges[edge] = edge
        if self.create_attribute_maps and edge.attributes is None:
            edge.attributes = {}
        return edge

    def add_edge_attributes(self, edge: Edge,
                            attributes: Optional[Attributes]) -> Optional[Edge]:
        """
        Attach attributes to an existing edge without creating one.

        When an endpoint is a group member and the graph holds the matching
        group edge, the attributes not already set on the group edge are
        recorded as a group member edge. Returns the edge the attributes
        went to, or None if there is no such edge.
        """
        attributes = dict(attributes or {})
        existing = self._edges.get(edge)
        if existing is not None:
            _merge_attributes(existing, attributes)
            return existing

        candidate = edge
        other = edge.from_node
        if other in self._nodes:
            member = edge.to_node
            if member in self._nodes:
                return None
        else:
            member = other
            other = edge.to_node
            if other not in self._nodes:
                group = self._group_of.get(other)
                if group is None:
                    return None
                candidate = candidate.clone_replace(other, group)

        group = self._group_of.get(member)
        if group is None:
            return None
        group_edge = self._edges.get(candidate.clone_replace(member, group))
        if group_edge is None:
            return None

        if group_edge.attributes is not None:
            for key in group_edge.attributes:
                attributes.pop(key, None)
            if not attributes:
                return group_edge

        member_edge = edge.clone_without_attributes()
        member_edge.attributes = attributes
        member_edge = self._add_member_edge(member, member_edge)
        if other in self._group_of:
            member_edge = self._add_member_edge(other, member_edge)
        return member_edge

    def _add_member_edge(self, node: Node, edge: Edge) -> Edge:
        edges = self._member_edges.setdefault(node, [])
        if edge in edges:
            previous = edges.pop(edges.index(edge))
            _merge_attributes(previous, edge.attributes)
            edge = previous
        edges.append(edge)
        return edge

    def _discard_member_edge(self, node: Node, edge: Edge) -> None:
        edges = self._member_edges.get(node)
        if edges is None:
            return
        if edge in edges:
            edges.remove(edge)
        if not edges:
            del self._member_edges[node]

    def remove_edge(self, edge: Edge) -> Optional[Edge]:
        """Remove an edge, and the member edges it stood for if an endpoint is a group."""
        from_edges = self._node_edges.get(edge.from_node)
        if from_edges is None:
            return None
        if edge in from_edges:
            from_edges.remove(edge)
        to_edges = self._node_edges.get(edge.to_node)
        if to_edges is not None and edge in to_edges:
            to_edges.remove(edge)

        from_members = self._group_members.get(edge.from_node)
        to_members = self._group_members.get(edge.to_node)
        if from_members is not None or to_members is not None:
            self._remove_member_edges(edge.from_node, from_members,
                                      {edge.to_node, *(to_members or ())}, edge.linktype)
            self._remove_member_edges(edge.to_node, to_members,
                                      {edge.from_node, *(from_members or ())}, edge.linktype)
        return self._edges.pop(edge, None)

    def _remove_member_edges(self, group: Node, members: Optional[List[Node]],
                             others: Set[Node], linktype: str) -> None:
        for node in [group, *(members or ())]:
            edges = self._member_edges.get(node)
            if edges is None:
                continue
            edges[:] = [e for e in edges
                        if e.linktype != linktype or e.other_node(node) not in others]
            if not edges:
                del self._member_edges[node]

    def get_edge(self, edge: Edge) -> Optional[Edge]:
        return self._edges.get(edge)

    def get_edge_with_source(self, edge: Edge, source: Node) -> Optional[Edge]:
        """The stored edge, inverted if needed so that ``source`` is its source."""
        stored = self._edges.get(edge)
        if stored is None:
            return None
        if stored.source == source:
            return stored
        return stored.inverted(self.reverse_name(stored.linktype))

    def has_edge(self, edge: Edge) -> bool:
        return edge in self._edges

    @property
    def edges(self) -> AbstractSet[Edge]:
        return self._edges.keys()

    @property
    def num_edges(self) -> int:
        return len(self._edges)

    # Groups

    def define_group(self, group: Node, members: List[Node]) -> Optional[Node]:
        """
        Compress ``members`` into ``group``. Returns the stored group node,
        or None if the definition conflicts with the current graph.
        """
        if not members or len(set(members)) != len(members):
            return None
        if group in self._group_members or group in self._group_of:
            return None
        for member in members:
            if member in self._nodes or member in self._group_of:
                return None
        group = self.ensure_node(group)
        self._group_members[group] = list(members)
        for member in members:
            self._group_of[member] = group
        return group

    def ungroup_member(self, node: Node) -> Optional[Node]:
        """
        Turn a group member into a standalone node.

        The node inherits the group's attributes (its own win), special
        status and edges. Recorded member edge attributes are restored,
        with group edge attributes taking priority. A group left without
        members is removed.
        """
        group = self._group_of.pop(node, None)
        if group is None:
            return None
        members = self._group_members[group]
        member = members.pop(members.index(node))
        if node is not member and node.attributes:
            member.put_all(node.attributes)

        stored = self.ensure_node(member)
        if group.attributes is not None:
            inherited = dict(group.attributes)
            inherited.update(stored.attributes or {})
            stored.attributes = inherited
        if group in self._special:
            self.mark_special(stored)

        for group_edge in list(self._node_edges[group]):
            self.ensure_edge(group_edge.clone_replace(group, stored))

        for edge in self._member_edges.pop(stored, []):
            existing = self._edges.get(edge)
            other = edge.other_node(stored)
            # A member edge to another member stays on record for that member
            if existing is not None or other not in self._group_of:
                self._discard_member_edge(other, edge)
            if existing is not None and edge.attributes is not None:
                group_attributes = existing.attributes
                existing.attributes = dict(edge.attributes)
                _merge_attributes(existing, group_attributes)

        if not members:
            self.remove_node(group)
        return stored

    def ungroup(self, group: Node) -> int:
        """Ungroup every member of ``group``; returns the number of members."""
        members = self._group_members.get(group)
        if members is None:
            return 0
        count = 0
        while members:
            count += 1
            self.ungroup_member(members[0])
        return count

    def ungroup_all(self) -> int:
        """Ungroup every group; returns the net number of nodes added."""
        count = 0
        for group in list(self._group_members):
            count += self.ungroup(group) - 1
        return count

    def is_group_node(self, node: Node) -> bool:
        return node in self._group_members

    def is_group_member(self, node: Node) -> bool:
        return node in self._group_of

    def group_of(self, member: Node) -> Optional[Node]:
        return self._group_of.get(member)

    def get_group_member(self, member: Node) -> Optional[Node]:
        """The stored member instance equal to ``member``."""
        group = self._group_of.get(member)
        if group is None:
            return None
        for node in self._group_members[group]:
            if node == member:
                return node
        return None

    def members_of(self, group: Node) -> Optional[List[Node]]:
        members = self._group_members.get(group)
        return None if members is None else list(members)

    @property
    def group_nodes(self) -> AbstractSet[Node]:
        return self._group_members.keys()

    @property
    def group_members(self) -> AbstractSet[Node]:
        return self._group_of.keys()

    def group_member_edges(self) -> List[Edge]:
        """
        Sorted member edges that still carry information, i.e. have
        attributes and connect a member to a node or another member.
        Stale records are dropped on the way.
        """
        result: Set[Edge] = set()
        for node in list(self._member_edges):
            kept = []
            for edge in self._member_edges[node]:
                f, t = edge.from_node, edge.to_node
                if edge.attributes and (
                        (t in self._group_of and (f in self._nodes or f in self._group_of))
                        or (f in self._group_of and t in self._nodes)):
                    kept.append(edge)
                    result.add(edge)
            if kept:
                self._member_edges[node] = kept
            else:
                del self._member_edges[node]
        return sorted(result)

    # Link types

    def canonical_name(self, linktype: str) -> str:
        return self.linktypes.canonical_name(linktype)

    def reverse_name(self, linktype: str) -> str:
        return self.linktypes.reverse_name(linktype)

    def is_symmetric(self, linktype: str) -> bool:
        return self.linktypes.is_symmetric(linktype)

    def is_canonical_direction(self, linktype: str) -> bool:
        return self.linktypes.is_canonical_direction(linktype)

    def define_reverse(self, forward: str, reverse: Optional[str] = None) -> None:
        self.linktypes.define_reverse(forward, reverse)

    def define_symmetric(self, linktype: str) -> None:
        self.linktypes.define_symmetric(linktype)

    def undefine_reverse_types(self) -> None:
        self.linktypes.undefine_reverse_types()

    def linktype_definitions(self) -> AbstractSet[str]:
        return self.linktypes.definitions()

    def readable_type(self, edge: Optional[Edge]) -> Optional[str]:
        """Human-readable link type, resolving a few legacy names."""
        if edge is None:
            return None
        linktype = edge.linktype
        if linktype == "=":
            return ""
        if linktype == "has":
            to_type = edge.to_node.type
            if to_type.endswith("Variant"):
                return "has_variant"
            if to_type.endswith("Function"):
                return "has_function"
        return linktype

    def readable_reverse_type(self, edge: Optional[Edge]) -> Optional[str]:
        if edge is None:
            return None
        reverse = self.reverse_name(edge.linktype)
        if not reverse.startswith("-"):
            return reverse
        if len(reverse) == 1:
            return ""
        name = reverse[1:]
        reverse = BUILTIN_REVERSE_LINKTYPES.get(name, reverse)
        if name == "has":
            to_type = edge.to_node.type
            if to_type.endswith("Variant"):
                return "is_variant_of"
            if to_type.endswith("Function"):
                return "is_function_of"
        elif name == "is_part_of":
            from_type = edge.from_node.type
            if from_type.endswith(("Site", "Element", "Modification")) or from_type == "Repeat":
                return "contains"
        elif name == "is_found_in":
            if edge.to_node.type.endswith("Component"):
                return "is_location_of"
        return reverse

    # Comments

    def add_comment(self, comment: str) -> None:
        self.comments.append(comment)

    def add_special_comment(self, key: str, value: str) -> Set[str]:
        """Add a value under ``key``. An empty value only creates the entry."""
        comment = self._special_comments.get(key)
        if comment is None:
            comment = self._special_comments[key] = SpecialComment()
        return comment.add(value)

    def set_special_comment(self, key: str, value: str) -> Set[str]:
        """Replace whatever is stored under ``key`` with a single value."""
        comment = self._special_comments[key] = SpecialComment([value])
        return comment.values()

    def ensure_special_comment(self, key: str) -> Set[str]:
        return self.add_special_comment(key, "")

    def get_special_comment(self, key: str) -> Optional[Set[str]]:
        comment = self._special_comments.get(key)
        return None if comment is None else comment.values()

    def get_special_comment_map(self, key: str) -> Dict[str, str]:
        comment = self._special_comments.get(key)
        if comment is None:
            comment = self._special_comments[key] = SpecialComment.from_map({})
        return comment.as_map(key)

    def put_special_comment(self, name: str, key: str, value: str) -> None:
        self.get_special_comment_map(name)[key] = value

    def copy_special_comments_from(self, other: "BMGraph") -> None:
        for key, comment in other._special_comments.items():
            self._special_comments[key] = comment.copy()

    def special_comment_keys(self) -> Iterable[str]:
        return self._special_comments.keys()

    def special_comment_strings(self) -> List[str]:
        """
        All special comments as sorted ``_key value`` lines (without ``#``).
        A keyword stored without values (``# _flag``) yields no line.
        """
        lines = set()
        for key, comment in self._special_comments.items():
            for value in comment.values():
                lines.add(f"_{key} {value}")
        return sorted(lines)
