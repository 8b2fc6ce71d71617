# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Read bmgraph files (or URLs, or stdin) as one graph and print it in
canonical sorted form.

    python -m bmgraph [--ungroup] [--no-comments] [files ...]
"""
import argparse
import io
import logging
import sys
from typing import List, Optional

from .config import BMGraphConfig
from .errors import GraphFetchError
from .reader import Reader
from .utils import fetch_graph_bytes, is_url
from .writer import BMGraphWriter

logger = logging.getLogger("bmgraph")

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bmgraph",
        description="Canonicalize bmgraph files.",
    )
    parser.add_argument("files", nargs="*",
                        help="Files or http(s) URLs to read (default: stdin)")
    parser.add_argument("--ungroup", action="store_true",
                        help="Expand all node groups into individual nodes")
    parser.add_argument("--no-comments", action="store_true",
                        help="Leave out regular comments")
    parser.add_argument("--canonize-edges", action="store_true",
                        help="Write every edge in its canonical direction")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log progress to stderr")
    return parser

def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    config = BMGraphConfig.from_env()
    reader = Reader(config=config)
    ok = True
    if not args.files:
        ok = reader.parse_stream(sys.stdin.buffer, "stdin")
    for path in args.files:
        if is_url(path):
            try:
                data = fetch_graph_bytes(path, timeout=config.fetch_timeout)
            except GraphFetchError as e:
                print(f"Error:{path}:0:0:{e}", file=sys.stderr)
                ok = False
                continue
            ok = reader.parse_stream(io.BytesIO(data), path) and ok
        else:
            ok = reader.parse_file(path) and ok

    graph = reader.graph
    if args.ungroup:
        added = graph.ungroup_all()
        logger.info(f"Ungrouping added {added} nodes")

    BMGraphWriter(graph, sys.stdout).write_sorted(
        comments=not args.no_comments, canonize_edges=args.canonize_edges)
    return 0 if ok else 1

if __name__ == "__main__":
    sys.exit(main())
