# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
import io

import pytest

from bmgraph import BMGraph, BMGraphWriter, Edge, Node, Reader
from conftest import RecordingCallback

SAMPLE = """\
# A sample graph
# _database biomine v1
Gene_1
# _group Group_1 2 Protein p1,p2
# _symmetric interacts
# _reverse regulates regulated_by
Gene_1 Gene_2 regulates weight=0.5
Gene_3 Gene_1 regulated_by
Gene_2 Gene_1 interacts label=two+words
Group_1 Gene_1 codes_for
# _edge Protein_p1 Gene_1 codes_for note=first
# _attributes Gene_4 color=red
# _attributes Protein_p2 name=P2
# _custom hello
"""

CANONICAL = """\
# A sample graph
# _custom hello
# _database biomine v1
Gene_1
# _group Group_1 2 Protein p1,p2
# _symmetric interacts
# _reverse regulates regulated_by
Gene_1 Gene_2 interacts label=two+words
Gene_1 Gene_2 regulates weight=0.5
Gene_3 Gene_1 regulated_by
Group_1 Gene_1 codes_for
# _edge Protein_p1 Gene_1 codes_for note=first
# _attributes Gene_4 color=red
# _attributes Protein_p2 name=P2
"""

def read(text: str) -> BMGraph:
    callback = RecordingCallback()
    reader = Reader(callback=callback)
    assert reader.parse_string(text, "test")
    assert callback.warnings == []
    return reader.graph

def write_sorted(graph: BMGraph, **kwargs) -> str:
    out = io.StringIO()
    BMGraphWriter(graph, out).write_sorted(**kwargs)
    return out.getvalue()

@pytest.fixture
def sample():
    return read(SAMPLE)

def test_canonical_form(sample):
    assert write_sorted(sample, comments=True) == CANONICAL

def test_canonical_form_is_stable(sample):
    text = write_sorted(sample, comments=True)
    assert write_sorted(read(text), comments=True) == text

def test_regular_comments_are_optional(sample):
    text = write_sorted(sample)
    assert "# A sample graph" not in text
    assert "# _custom hello" in text

def test_canonize_edges(sample):
    text = write_sorted(sample, canonize_edges=True)
    assert "Gene_1 Gene_3 regulates\n" in text
    assert "Gene_3 Gene_1 regulated_by" not in text

def test_ignored_attributes(sample):
    out = io.StringIO()
    writer = BMGraphWriter(sample, out, ignored_node_attributes=["color"])
    writer.ignore_edge_attribute("weight", "label")
    writer.write_sorted()
    text = out.getvalue()
    assert "Gene_1 Gene_2 regulates\n" in text
    assert "Gene_1 Gene_2 interacts\n" in text
    # Gene_4 has no edges, so it is still listed
    assert "# _attributes Gene_4\n" in text

    writer.unignore_edge_attribute("weight")
    writer.unignore_node_attribute("color")
    out.seek(0)
    out.truncate()
    writer.write_sorted()
    assert "weight=0.5" in out.getvalue()
    assert "color=red" in out.getvalue()

def test_write_insertion_order():
    graph = read("# b\n# a\nB_1 A_1 x\nA_1 C_1 x\n")
    out = io.StringIO()
    BMGraphWriter(graph, out).write()
    assert out.getvalue() == "# b\n# a\nB_1 A_1 x\nA_1 C_1 x\n"

def test_write_without_comments():
    graph = read("# note\n# _key value\nA_1\n")
    out = io.StringIO()
    BMGraphWriter(graph, out).write(comments=False)
    assert out.getvalue() == "# _key value\nA_1\n# _attributes A_1\n"

def test_keyword_only_special_comment_is_not_written():
    graph = read("# _flag\nA_1\n")
    assert graph.get_special_comment("flag") == set()
    assert "_flag" not in write_sorted(graph)

def test_escaped_values_survive():
    graph = BMGraph()
    edge = graph.ensure_edge(Edge(Node("A", "1"), Node("B", "1"), "x"))
    edge.put("note", "line one\nline two + more")
    text = write_sorted(graph)
    assert text == "A_1 B_1 x note=line+one\\nline+two+%2B+more\n"
    again = read(text)
    assert again.get_edge(edge).get("note") == "line one\nline two + more"

def test_database_fields_stop_at_first_missing():
    graph = BMGraph()
    graph.database = ["db", None, "server", None]
    assert write_sorted(graph) == "# _database db\n"

def test_empty_graph():
    assert write_sorted(BMGraph()) == ""
