# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Settings shared by the lexer, the reader and the graph.

Defaults can be overridden from the environment:
    BMGRAPH_MAX_TOKEN_LENGTH, BMGRAPH_CREATE_ATTRIBUTE_MAPS,
    BMGRAPH_SOURCE_NAME, BMGRAPH_FETCH_TIMEOUT
"""
import os
from dataclasses import dataclass

# Longest identifier or raw line the lexer buffers, in bytes
MAX_TOKEN_LENGTH = 1024

@dataclass
class BMGraphConfig:
    max_token_length: int = MAX_TOKEN_LENGTH
    create_attribute_maps: bool = True
    default_source_name: str = "input"
    fetch_timeout: float = 10

    @classmethod
    def from_env(cls) -> "BMGraphConfig":
        return cls(
            max_token_length=int(os.getenv("BMGRAPH_MAX_TOKEN_LENGTH", str(MAX_TOKEN_LENGTH))),
            create_attribute_maps=os.getenv("BMGRAPH_CREATE_ATTRIBUTE_MAPS", "true").lower() == "true",
            default_source_name=os.getenv("BMGRAPH_SOURCE_NAME", "input"),
            fetch_timeout=float(os.getenv("BMGRAPH_FETCH_TIMEOUT", "10")),
        )

DEFAULT_CONFIG = BMGraphConfig()
