# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.

class BMGraphError(Exception):
    """Base class for all bmgraph exceptions."""
    pass

class NodeFormatError(BMGraphError, ValueError):
    """Raised when a "type_dbid" node string cannot be split."""
    pass

class SpecialCommentError(BMGraphError, ValueError):
    """Raised when a special comment has an unusable representation."""
    pass

class ParserBusyError(BMGraphError, RuntimeError):
    """Raised when a parser is asked to parse while already parsing."""
    pass

class GraphFetchError(BMGraphError):
    """Raised when a graph cannot be fetched from a remote URL."""
    pass
