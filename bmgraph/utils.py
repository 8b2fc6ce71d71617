# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
import io
import logging
import os
import sys
from typing import List, Optional, Tuple, Union

import numpy as np
import requests

from .config import DEFAULT_CONFIG, BMGraphConfig
from .entities import Edge, Node
from .errors import GraphFetchError
from .graph import BMGraph
from .reader import ErrorCallback, Reader
from .writer import BMGraphWriter

logger = logging.getLogger(__name__)

def read_graph(*paths, callback: Optional[ErrorCallback] = None,
               config: Optional[BMGraphConfig] = None) -> BMGraph:
    """Read all files into one graph, or stdin if no paths are given."""
    reader = Reader(callback=callback, config=config)
    if not paths:
        reader.parse_stream(sys.stdin.buffer, "stdin")
    for path in paths:
        reader.parse_file(path)
    return reader.graph

def is_url(path) -> bool:
    return isinstance(path, str) and path.startswith(("http://", "https://"))

def fetch_graph_bytes(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> bytes:
    """
    Download a bmgraph file.

    Raises:
        GraphFetchError: if the request fails or returns an error status.
    """
    session = session or requests.Session()
    if timeout is None:
        timeout = DEFAULT_CONFIG.fetch_timeout
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise GraphFetchError(f"Failed to fetch graph from {url}: {e}") from e
    logger.debug(f"Fetched {len(resp.content)} bytes from {url}")
    return resp.content

def read_graph_url(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    callback: Optional[ErrorCallback] = None,
    config: Optional[BMGraphConfig] = None,
) -> BMGraph:
    """Download and read a graph over HTTP."""
    config = config or DEFAULT_CONFIG
    if timeout is None:
        timeout = config.fetch_timeout
    data = fetch_graph_bytes(url, session=session, timeout=timeout)
    reader = Reader(callback=callback, config=config)
    reader.parse_stream(io.BytesIO(data), url)
    return reader.graph

def write_graph(graph: BMGraph, target: Union[str, os.PathLike, io.TextIOBase]) -> None:
    """Write the canonical form, comments included, to a path or text stream."""
    if isinstance(target, (str, os.PathLike)):
        with open(target, "w", encoding="utf-8") as stream:
            BMGraphWriter(graph, stream).write_sorted(comments=True)
    else:
        BMGraphWriter(graph, target).write_sorted(comments=True)

def find_edges(graph: BMGraph, node1: Node, node2: Node) -> List[Edge]:
    """All edges between two nodes, of any link type."""
    edges1 = graph.node_edges(node1)
    edges2 = graph.node_edges(node2)
    if len(edges1) > len(edges2):
        node1, node2, edges1 = node2, node1, edges2
    return [edge for edge in edges1 if edge.other_node(node1) == node2]

def find_edge(graph: BMGraph, node1: Node, node2: Node) -> Optional[Edge]:
    edges = find_edges(graph, node1, node2)
    return edges[0] if edges else None

def graph_from_template(template: BMGraph) -> BMGraph:
    """
    An empty graph sharing the template's settings: link-type definitions,
    database descriptor and special comments. Nodes, edges and regular
    comments are not copied.
    """
    graph = BMGraph()
    graph.create_attribute_maps = template.create_attribute_maps
    graph.database = list(template.database)
    graph.linktypes = template.linktypes.copy()
    graph.copy_special_comments_from(template)
    return graph

def _weight(entity, attribute: str) -> float:
    value = entity.get(attribute)
    if value is None:
        raise ValueError(f"{entity} has no {attribute!r} attribute")
    return float(value)

def random_walk_matrix(
    graph: BMGraph,
    start: Node,
    restart_probability: float,
    transition_attribute: str,
    restart_attribute: Optional[str] = None,
) -> Tuple[np.ndarray, List[Node]]:
    """
    Transition matrix of a random walk with restart at ``start``.

    Edge weights come from ``transition_attribute``; a node may add its own
    restart weight through ``restart_attribute``. Row ``i`` holds the
    transition probabilities out of ``nodes[i]``.

    Returns:
        (matrix, nodes) where ``nodes`` maps matrix indices to nodes.
    """
    nodes = list(graph.nodes)
    index = {node: i for i, node in enumerate(nodes)}
    if start not in index:
        raise ValueError(f"Start node {start} is not in the graph")
    start_index = index[start]
    matrix = np.zeros((len(nodes), len(nodes)))

    for i, u in enumerate(nodes):
        weights = {}
        for edge in graph.node_edges(u):
            v = edge.other_node(u)
            weights[v] = weights.get(v, 0.0) + _weight(edge, transition_attribute)

        node_restart = 0.0
        if restart_attribute is not None and u.get(restart_attribute) is not None:
            node_restart = _weight(u, restart_attribute)
        total = sum(weights.values()) + node_restart
        if total == 0:
            matrix[i, start_index] = 1.0
            continue

        weights[start] = weights.get(start, 0.0) + node_restart
        for v, weight in weights.items():
            matrix[i, index[v]] = (1 - restart_probability) * weight / total
        matrix[i, start_index] += restart_probability
    return matrix, nodes
