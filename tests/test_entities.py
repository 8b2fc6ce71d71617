# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
import pytest

from bmgraph import Edge, Node, NodeFormatError
from bmgraph.comments import SpecialComment
from bmgraph.errors import SpecialCommentError

A = Node("A", "1")
B = Node("B", "2")

def test_node_identity_ignores_attributes():
    assert Node("A", "1", {"x": "y"}) == Node("A", "1")
    assert hash(Node("A", "1", {"x": "y"})) == hash(Node("A", "1"))
    assert Node("A", "2") < Node("B", "1")
    assert Node("A", "1") < Node("A", "2")
    assert str(Node("Gene", "EntrezGene:1")) == "Gene_EntrezGene:1"

def test_node_parse():
    node = Node.parse("Gene_a_b")
    assert (node.type, node.dbid) == ("Gene", "a_b")
    with pytest.raises(NodeFormatError, match="Unparseable"):
        Node.parse("Gene")
    # Still a ValueError for callers that do not know the package
    with pytest.raises(ValueError):
        Node.parse("")

def test_split_id():
    assert Node("Gene", "EntrezGene:123").split_id() == ("EntrezGene", "123")
    assert Node("Gene", "x").split_id() is None
    assert Node("Gene", ":1").split_id() is None
    assert Node("Gene", "a:").split_id() is None

def test_node_copy():
    node = Node("A", "1", {"k": "v"})
    other = node.copy()
    other.put("k", "w")
    assert node.get("k") == "v"

def test_attributes():
    node = Node("A", "1")
    assert node.get("k") is None
    with pytest.raises(ValueError):
        node.put("k", "v")
    node.put_all({"k": "v"})
    assert node.put("k", "w") == "v"
    # An empty value removes the key
    node.put("k", "")
    assert node.attributes == {}
    node.put_all(None)
    assert node.attributes == {}

def test_attributes_to_string():
    node = Node("A", "1", {"b": "two words", "a": "x+y", "empty": "", "": "v"})
    assert node.attributes_to_string() == " a=x%2By b=two+words"
    assert node.attributes_to_string({"a"}) == " b=two+words"
    assert Node("A", "1").attributes_to_string() == ""

def test_edge_str():
    assert str(Edge(A, B, "likes")) == "A_1 B_2 likes"
    assert str(Edge(A, B)) == "A_1 B_2 +"
    reversed_edge = Edge(A, B, "likes", reversed="liked_by")
    assert str(reversed_edge) == "B_2 A_1 liked_by"
    assert reversed_edge.to_canonical_string() == "A_1 B_2 likes"
    assert str(Edge(A, B, "", reversed="-")) == "B_2 A_1 -"

def test_symmetric_edge_sorts_endpoints():
    edge = Edge(B, A, "knows", reversed="knows")
    assert (edge.from_node, edge.to_node) == (A, B)
    assert edge.is_symmetric
    assert not edge.is_reversed
    assert edge.reverse_type is None

def test_edge_identity():
    assert Edge(A, B, "likes", {"w": "1"}) == Edge(A, B, "likes", reversed="liked_by")
    assert Edge(A, B, "likes") != Edge(B, A, "likes")
    assert Edge(A, B, "likes") != Edge(A, B, "knows")
    assert sorted([Edge(B, A, "x"), Edge(A, B, "y"), Edge(A, B, "x")]) == [
        Edge(A, B, "x"), Edge(A, B, "y"), Edge(B, A, "x")]

def test_edge_direction():
    edge = Edge(A, B, "likes", {"w": "1"})
    assert (edge.source, edge.target) == (A, B)
    inverted = edge.inverted("liked_by")
    assert inverted.is_reversed
    assert (inverted.source, inverted.target) == (B, A)
    assert inverted.reverse_type == "liked_by"
    assert inverted.attributes == {"w": "1"}
    assert inverted.attributes is not edge.attributes
    back = inverted.inverted("ignored")
    assert not back.is_reversed
    assert back.canonical_direction() is back

def test_edge_helpers():
    edge = Edge(A, B, "likes", {"w": "1"})
    assert edge.has_node(A)
    assert edge.other_node(A) == B
    assert edge.other_node(B) == A
    c = Node("C", "3")
    replaced = edge.clone_replace(A, c)
    assert (replaced.from_node, replaced.to_node) == (c, B)
    assert replaced.attributes == {"w": "1"}
    assert edge.clone_without_attributes().attributes is None

# --- Special comments ---

def test_special_comment_values():
    comment = SpecialComment(["a", "", "b"])
    assert comment.values() == {"a", "b"}
    assert comment.add("a") == {"a", "b"}
    assert len(comment) == 2
    assert not comment.is_map

def test_special_comment_promotion_is_one_way():
    comment = SpecialComment(["x=1", "y=2=3"])
    assert comment.as_map() == {"x": "1", "y": "2=3"}
    assert comment.is_map
    comment.add("z=4")
    assert comment.values() == {"x=1", "y=2=3", "z=4"}
    with pytest.raises(SpecialCommentError):
        comment.add("plain")

def test_special_comment_copy():
    comment = SpecialComment.from_map({"k": "v"})
    other = comment.copy()
    other.put("k", "w")
    assert comment.as_map() == {"k": "v"}
