# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Nodes and edges of a bmgraph.

Identity and ordering of both never involve attributes. A node is
identified by ``(type, dbid)``; an edge by ``(from, to, linktype)``
where the endpoints are always stored in the link type's canonical
direction.
"""
from __future__ import annotations

import functools
from typing import AbstractSet, Dict, Optional, Tuple

from .errors import NodeFormatError
from .escape import escape

NO_LINKTYPE = "+"

Attributes = Dict[str, str]

class Entity:
    """Common attribute handling for nodes and edges.

    ``attributes`` is ``None`` until a map is attached; an entity without a
    map is distinct from one with an empty map.
    """

    def __init__(self, attributes: Optional[Attributes] = None):
        self.attributes = attributes

    def get(self, key: str) -> Optional[str]:
        if self.attributes is None:
            return None
        return self.attributes.get(key)

    def put(self, key: str, value: Optional[str]) -> Optional[str]:
        """Set an attribute. An empty or missing value removes the key."""
        if self.attributes is None:
            raise ValueError(f"{self} has no attribute map")
        previous = self.attributes.get(key)
        if not value:
            self.attributes.pop(key, None)
        else:
            self.attributes[key] = value
        return previous

    def remove(self, key: str) -> Optional[str]:
        if self.attributes is None:
            raise ValueError(f"{self} has no attribute map")
        return self.attributes.pop(key, None)

    def put_all(self, attributes: Optional[Attributes]) -> None:
        if not attributes:
            return
        if self.attributes is None:
            self.attributes = dict(attributes)
        else:
            self.attributes.update(attributes)

    def clear_attributes(self) -> None:
        if self.attributes is not None:
            self.attributes.clear()

    def attributes_to_string(
        self,
        ignored: AbstractSet[str] = frozenset(),
        before: str = " ",
        between: str = "=",
        after: str = "",
    ) -> str:
        """Serialize attributes sorted by key, escaped for a bmgraph line."""
        if not self.attributes:
            return ""
        parts = []
        for key in sorted(self.attributes):
            # An empty value cannot be read back
            if not key or key in ignored or not self.attributes[key]:
                continue
            parts.append(before + escape(key.replace(between, ":")) + between
                         + escape(self.attributes[key]) + after)
        return "".join(parts)

@functools.total_ordering
class Node(Entity):
    def __init__(self, type: str, dbid: str, attributes: Optional[Attributes] = None):
        super().__init__(attributes)
        self.type = type
        self.dbid = dbid

    @classmethod
    def parse(cls, node_id: str) -> "Node":
        """Build a node from ``Type_dbid``, splitting on the first underscore."""
        type_, sep, dbid = node_id.partition("_")
        if not sep:
            raise NodeFormatError(f"Unparseable id for a node: {node_id}")
        return cls(type_, dbid)

    @classmethod
    def from_token(cls, token) -> "Node":
        return cls(token.get("type"), token.get("dbid"))

    def split_id(self) -> Optional[Tuple[str, str]]:
        """Return ``(db, id)`` when the dbid has the form ``db:id``."""
        db, sep, id_ = self.dbid.partition(":")
        if not sep or not db or not id_:
            return None
        return db, id_

    def copy(self) -> "Node":
        return Node(self.type, self.dbid,
                    None if self.attributes is None else dict(self.attributes))

    def _key(self) -> Tuple[str, str]:
        return (self.type, self.dbid)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "Node") -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"{self.type}_{self.dbid}"

    def __repr__(self) -> str:
        return f"Node({self.type!r}, {self.dbid!r})"

@functools.total_ordering
class Edge(Entity):
    """
    An edge stored in canonical direction.

    ``reversed`` is the declared link type when the edge was declared
    against its canonical direction, ``None`` otherwise. For symmetric
    link types ``reversed == linktype`` and the endpoints are sorted.
    """

    def __init__(
        self,
        from_node: Node,
        to_node: Node,
        linktype: Optional[str] = None,
        attributes: Optional[Attributes] = None,
        reversed: Optional[str] = None,
    ):
        super().__init__(attributes)
        linktype = linktype or ""
        if reversed is not None and reversed == linktype and to_node < from_node:
            from_node, to_node = to_node, from_node
        self.from_node = from_node
        self.to_node = to_node
        self.linktype = linktype
        self.reversed = reversed

    @property
    def is_symmetric(self) -> bool:
        return self.reversed is not None and self.reversed == self.linktype

    @property
    def is_reversed(self) -> bool:
        return self.reversed is not None and self.reversed != self.linktype

    @property
    def reverse_type(self) -> Optional[str]:
        """The declared reverse name, ``None`` for symmetric edges."""
        if self.is_symmetric:
            return None
        return self.reversed

    @property
    def source(self) -> Node:
        return self.to_node if self.is_reversed else self.from_node

    @property
    def target(self) -> Node:
        return self.from_node if self.is_reversed else self.to_node

    def has_node(self, node: Node) -> bool:
        return node == self.from_node or node == self.to_node

    def other_node(self, node: Node) -> Node:
        return self.to_node if node == self.from_node else self.from_node

    def set_node_references(self, from_node: Node, to_node: Node) -> None:
        """Swap in equal node instances, keeping the stored order."""
        if from_node == self.from_node:
            self.from_node, self.to_node = from_node, to_node
        else:
            self.from_node, self.to_node = to_node, from_node

    def _copied_attributes(self) -> Optional[Attributes]:
        return None if self.attributes is None else dict(self.attributes)

    def clone_with(self, from_node: Node, to_node: Node) -> "Edge":
        return Edge(from_node, to_node, self.linktype,
                    self._copied_attributes(), self.reversed)

    def clone_replace(self, original: Node, replacement: Node) -> "Edge":
        """Copy of this edge with ``original`` swapped for ``replacement``."""
        from_node = replacement if self.from_node == original else self.from_node
        to_node = replacement if self.to_node == original else self.to_node
        return self.clone_with(from_node, to_node)

    def clone_without_attributes(self) -> "Edge":
        return Edge(self.from_node, self.to_node, self.linktype, None, self.reversed)

    def copy(self) -> "Edge":
        return self.clone_with(self.from_node, self.to_node)

    def canonical_direction(self) -> "Edge":
        if not self.is_reversed:
            return self
        return Edge(self.from_node, self.to_node, self.linktype,
                    self._copied_attributes())

    def reverse_direction(self, reverse_type: Optional[str]) -> "Edge":
        if self.is_symmetric or self.is_reversed:
            return self
        return Edge(self.from_node, self.to_node, self.linktype,
                    self._copied_attributes(), reverse_type or "")

    def inverted(self, reverse_type: Optional[str]) -> "Edge":
        if self.is_symmetric:
            return self
        if self.is_reversed:
            return self.canonical_direction()
        return self.reverse_direction(reverse_type)

    def _key(self) -> Tuple[Node, Node, str]:
        return (self.from_node, self.to_node, self.linktype)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "Edge") -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        if self.is_reversed:
            return f"{self.to_node} {self.from_node} {self.reversed or NO_LINKTYPE}"
        return self.to_canonical_string()

    def to_canonical_string(self) -> str:
        return f"{self.from_node} {self.to_node} {self.linktype or NO_LINKTYPE}"

    def __repr__(self) -> str:
        return f"Edge({self.from_node!r}, {self.to_node!r}, {self.linktype!r})"
