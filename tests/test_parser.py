# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
import io

import pytest

from bmgraph import BMGraphConfig, Parser, ParserBusyError, ParserCallback

class Events(ParserCallback):
    """Records every callback as a tuple."""

    def __init__(self, stop_after=None):
        self.events = []
        self.errors = []
        self.stop_after = stop_after

    def _record(self, *event):
        self.events.append(event)
        return self.stop_after is None or len(self.events) < self.stop_after

    def error(self, message, source, line, column):
        self.errors.append((message, source, line, column))
        return True

    def special_node(self, node):
        return self._record("special", node.text, dict(node.attributes))

    def edge(self, from_node, to_node, linktype, attributes, add_attributes):
        return self._record("edge", from_node.text, to_node.text,
                            None if linktype is None else linktype.text,
                            attributes, add_attributes)

    def node_attributes(self, node, attributes):
        return self._record("attributes", node.text, attributes)

    def node_group(self, group, members):
        return self._record("group", group.text, [m.text for m in members])

    def reverse_linktype(self, forward, reverse):
        return self._record("reverse", forward.text, reverse.text)

    def symmetric_linktype(self, linktype):
        return self._record("symmetric", linktype.text)

    def database(self, name, version, server, url):
        return self._record("database", *[None if t is None else t.text
                                          for t in (name, version, server, url)])

    def node_expand_url(self, url):
        return self._record("node_expand_url", url.text)

    def node_expand_program(self, program):
        return self._record("node_expand_program", program.text)

    def special_comment(self, keyword, content):
        return self._record("special_comment", keyword.text, content)

    def comment(self, comment):
        return self._record("comment", comment.text)

def parse(text, callback=None, config=None):
    callback = callback or Events()
    parser = Parser(callback, config)
    ok = parser.parse(io.BytesIO(text.encode("utf-8")), "test")
    return callback, ok, parser

# --- Nodes and edges ---

def test_special_node():
    events, ok, _ = parse("Gene_EntrezGene:123\n")
    assert ok
    assert events.events == [("special", "Gene_EntrezGene:123", {
        "type": "Gene", "dbid": "EntrezGene:123", "db": "EntrezGene", "id": "123"})]

def test_dbid_keeps_underscores():
    events, ok, _ = parse("Gene_a_b")
    assert ok
    assert events.events[0][2]["dbid"] == "a_b"
    assert "db" not in events.events[0][2]

def test_edge_with_attributes():
    events, ok, _ = parse("A_1 B_2 likes weight=0.5 label=two+words\n")
    assert ok
    assert events.events == [
        ("edge", "A_1", "B_2", "likes", {"weight": "0.5", "label": "two words"}, False)]

def test_edge_without_linktype():
    events, _, _ = parse("A_1 B_2 +\nA_1 C_3\n")
    assert events.events == [
        ("edge", "A_1", "B_2", None, None, False),
        ("edge", "A_1", "C_3", None, None, False),
    ]

def test_trailing_space_after_attributes():
    events, ok, _ = parse("A_1 B_2 x k=v \n")
    assert ok
    assert events.events[0][4] == {"k": "v"}

def test_missing_linktype_after_space():
    events, ok, _ = parse("A_1 B_2 \n")
    assert not ok
    assert events.events == []
    assert events.errors[0][0] == "Start of an identifier expected, got NEWLINE"

# --- Comments ---

def test_comment():
    events, _, _ = parse("# hello world\n#\n")
    assert events.events == [("comment", "hello world")]

def test_percent_line_is_ignored():
    events, ok, _ = parse("% graphviz stuff\nA_1\n")
    assert ok
    assert [e[0] for e in events.events] == ["special"]

def test_unknown_special_comment():
    events, _, _ = parse("# _foo bar baz\n# _empty\n")
    assert events.events == [
        ("special_comment", "foo", "bar baz"),
        ("special_comment", "empty", ""),
    ]

def test_special_comment_needs_keyword():
    events, ok, _ = parse("# _ foo\n")
    assert not ok
    assert events.errors[0][0].startswith("Special comment keyword expected")

def test_node_attributes():
    events, _, _ = parse("# _attributes A_1 k=v\n")
    assert events.events == [("attributes", "A_1", {"k": "v"})]

def test_edge_attributes():
    events, _, _ = parse("# _edge A_1 B_2 t k=v\n")
    assert events.events == [("edge", "A_1", "B_2", "t", {"k": "v"}, True)]

def test_group():
    events, ok, _ = parse("# _group G_1 2 Gene a,b\n")
    assert ok
    assert events.events == [("group", "G_1", ["Gene_a", "Gene_b"])]

def test_group_with_colon_separators():
    events, ok, _ = parse("# _group G_1:2:Gene:a,b\n")
    assert ok
    assert events.events == [("group", "G_1", ["Gene_a", "Gene_b"])]

def test_group_count_mismatch():
    events, ok, _ = parse("# _group G_1 3 Gene a,b\nA_1\n")
    assert not ok
    assert events.errors[0][0] == "3 nodes expected, got 2"
    assert events.events == [("special", "A_1", {"type": "A", "dbid": "1"})]

def test_reverse_and_symmetric():
    events, ok, _ = parse("# _reverse likes liked_by\n# _symmetric knows\n")
    assert ok
    assert events.events == [("reverse", "likes", "liked_by"), ("symmetric", "knows")]

def test_canvas():
    events, ok, _ = parse("# _canvas 0,0,100.5,200\n")
    assert ok
    assert events.events == [("special_comment", "canvas", "0.0,0.0,100.5,200.0")]

def test_canvas_needs_numbers():
    events, ok, _ = parse("# _canvas 0,zero,1,1\n")
    assert not ok
    assert events.events == []
    assert events.errors[0][0] == "A number expected, got zero"

def test_database():
    events, _, _ = parse(
        "# _database biomine 1.0 server.example.org http://example.org/db\n"
        "# _database biomine\n")
    assert events.events == [
        ("database", "biomine", "1.0", "server.example.org", "http://example.org/db"),
        ("database", "biomine", None, None, None),
    ]

def test_node_expand():
    events, _, _ = parse(
        "# _node_expand_url http://example.org/expand?id=\n"
        "# _node_expand_program expander\n")
    assert events.events == [
        ("node_expand_url", "http://example.org/expand?id="),
        ("node_expand_program", "expander"),
    ]

# --- Errors and control flow ---

def test_error_skips_rest_of_line():
    events, ok, _ = parse("Foo B_2 likes\nA_1 B_1 x\n")
    assert not ok
    assert events.errors == [("UNDERSCORE expected, got SPACE", "test", 1, 4)]
    assert events.events == [("edge", "A_1", "B_1", "x", None, False)]

def test_abort_from_error_callback():
    class Abort(Events):
        def error(self, message, source, line, column):
            super().error(message, source, line, column)
            return False

    events, ok, parser = parse("Foo\nA_1\n", Abort())
    assert not ok
    assert parser.aborted
    assert events.events == []

def test_abort_from_semantic_callback():
    events, ok, parser = parse("A_1\nB_2\n", Events(stop_after=1))
    assert ok
    assert parser.aborted
    assert len(events.events) == 1

def test_lexer_error_does_not_abort():
    config = BMGraphConfig(max_token_length=8)
    events, ok, parser = parse("Gene_abcdefghijk\nA_1\n", config=config)
    assert not ok
    assert not parser.aborted
    assert events.errors[0][0] == "Identifier too long"
    # Adjacent identifier tokens are merged back together
    assert [e[1] for e in events.events] == ["Gene_abcdefghijk", "A_1"]

def test_invalid_utf8_is_an_error_but_parsing_continues():
    events = Events()
    parser = Parser(events)
    ok = parser.parse(io.BytesIO(b"A_\xff\xfe B_2 likes\nC_3\n"), "test")
    assert not ok
    assert not parser.aborted
    assert [e[0] for e in events.errors] == ["Invalid UTF-8 sequence"]
    assert events.events[0][:4] == ("edge", "A_��", "B_2", "likes")
    assert events.events[1][:2] == ("special", "C_3")

def test_state_is_reset_between_parses():
    parser = Parser(Events())
    assert not parser.parse(io.BytesIO(b"Foo\n"))
    assert parser.parse(io.BytesIO(b"A_1\n"))
    assert not parser.busy

def test_reentrant_parse_is_rejected():
    class Reentrant(ParserCallback):
        def special_node(self, node):
            self.parser.parse(io.BytesIO(b"B_2\n"))
            return True

    callback = Reentrant()
    parser = callback.parser = Parser(callback)
    with pytest.raises(ParserBusyError):
        parser.parse(io.BytesIO(b"A_1\n"))
    assert not parser.busy

def test_parse_file(tmp_path):
    path = tmp_path / "g.bmg"
    path.write_bytes(b"A_1 B_2 likes\n")
    events = Events()
    assert Parser(events).parse_file(path)
    assert events.events[0][:4] == ("edge", "A_1", "B_2", "likes")

def test_parse_missing_file(tmp_path):
    events = Events()
    path = tmp_path / "missing.bmg"
    assert not Parser(events).parse_file(path)
    assert events.errors[0][1:] == (str(path), 0, 0)

def test_default_source_name():
    events = Events()
    Parser(events).parse(io.BytesIO(b"Foo\n"))
    assert events.errors[0][1] == "input"
