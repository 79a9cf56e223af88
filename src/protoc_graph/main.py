from __future__ import annotations

import logging
import os
import sys
from typing import Callable

from google.protobuf.message import DecodeError

from protoc_graph.errors import DescriptorError
from protoc_graph.generator import graph_dump, imports_dump
from protoc_graph.plugin import Options, Plugin

LOG_LEVEL_ENV = "PROTOC_GRAPH_LOG_LEVEL"


def log_level() -> str:
    """Level name from PROTOC_GRAPH_LOG_LEVEL; unknown names fall back to WARNING."""
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        return "WARNING"
    return level


def _configure_logging() -> None:
    # stdout carries the response; everything else goes to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=log_level(),
        format="%(name)s: %(levelname)s: %(message)s",
    )


def run(generate: Callable[[Plugin], None]) -> None:
    """Run a generator as a protoc plugin on stdin/stdout."""
    _configure_logging()
    try:
        Options().run(generate)
    except (DescriptorError, DecodeError, ValueError) as e:
        print(f"protoc plugin error: {e}", file=sys.stderr)
        sys.exit(1)


def main_graph():
    """Entry point of protoc-gen-graph."""
    run(graph_dump.generate)


def main_imports():
    """Entry point of protoc-gen-imports."""
    run(imports_dump.generate)
