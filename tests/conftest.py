# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
import pytest

from bmgraph import ErrorCallback, Reader

class RecordingCallback(ErrorCallback):
    """Collects (message, source, line, column) tuples."""

    def __init__(self, abort_on_error=False):
        self.abort_on_error = abort_on_error
        self.errors = []
        self.warnings = []

    def on_error(self, message, source, line, column):
        self.errors.append((message, source, line, column))
        return not self.abort_on_error

    def on_warning(self, message, source, line, column):
        self.warnings.append((message, source, line, column))

    @property
    def warning_messages(self):
        return [w[0] for w in self.warnings]

    @property
    def error_messages(self):
        return [e[0] for e in self.errors]

@pytest.fixture
def recorder():
    return RecordingCallback()

@pytest.fixture
def read(recorder):
    """read(text) -> (graph, ok), reusing one reader per test."""
    readers = {}

    def _read(text, graph=None):
        reader = readers.get("reader")
        if reader is None or graph is not None:
            reader = readers["reader"] = Reader(graph=graph, callback=recorder)
        ok = reader.parse_string(text, "test")
        return reader.graph, ok

    return _read
