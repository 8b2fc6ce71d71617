# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
from .config import BMGraphConfig, DEFAULT_CONFIG
from .entities import Edge, Entity, Node, NO_LINKTYPE
from .errors import (
    BMGraphError,
    GraphFetchError,
    NodeFormatError,
    ParserBusyError,
    SpecialCommentError,
)
from .graph import BMGraph
from .parser import Parser, ParserCallback
from .reader import ErrorCallback, LoggingErrorCallback, Reader, StreamErrorCallback
from .writer import BMGraphWriter
from .utils import (
    find_edge,
    find_edges,
    graph_from_template,
    random_walk_matrix,
    read_graph,
    read_graph_url,
    write_graph,
)

__all__ = [
    "BMGraph",
    "BMGraphConfig",
    "BMGraphError",
    "BMGraphWriter",
    "DEFAULT_CONFIG",
    "Edge",
    "Entity",
    "ErrorCallback",
    "GraphFetchError",
    "LoggingErrorCallback",
    "NO_LINKTYPE",
    "Node",
    "NodeFormatError",
    "Parser",
    "ParserBusyError",
    "ParserCallback",
    "Reader",
    "SpecialCommentError",
    "StreamErrorCallback",
    "find_edge",
    "find_edges",
    "graph_from_template",
    "random_walk_matrix",
    "read_graph",
    "read_graph_url",
    "write_graph",
]
