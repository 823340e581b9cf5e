"""Command-line entry point.

Index mode reads file paths from stdin, one per line::

    find src -type f | cxxrag --index

Query mode reads the whole of stdin as one question and prints the
nearest chunks as JSON::

    echo "where is the socket closed" | cxxrag --query
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import BinaryIO, TextIO

from pydantic import TypeAdapter, ValidationError

from cxxrag.config import Settings
from cxxrag.errors import CxxragError, StoreError
from cxxrag.ingestion.embedder import EmbeddingGateway, get_embedding_gateway
from cxxrag.ingestion.pipeline import IngestionPipeline, IngestionStats, iter_paths
from cxxrag.retrieval.base import VectorStoreBase
from cxxrag.retrieval.chroma_store import ChromaVectorStore
from cxxrag.retrieval.models import QueryResult
from cxxrag.retrieval.retriever import CodeRetriever

logger = logging.getLogger(__name__)

_RESULTS = TypeAdapter(list[QueryResult])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cxxrag",
        description="Index C/C++ sources into a vector store, or query it.",
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "-i",
        "--index",
        dest="mode",
        action="store_const",
        const="index",
        help="Read file paths from stdin and index them",
    )
    mode.add_argument(
        "-q",
        "--query",
        dest="mode",
        action="store_const",
        const="query",
        help="Read a question from stdin and print the nearest chunks as JSON",
    )
    return parser


def run_index(
    settings: Settings,
    embedder: EmbeddingGateway,
    store: VectorStoreBase,
    stream: BinaryIO,
) -> IngestionStats:
    pipeline = IngestionPipeline(embedder, store, batch_threshold=settings.batch_threshold)
    return pipeline.run(iter_paths(stream))


def run_query(
    settings: Settings,
    embedder: EmbeddingGateway,
    store: VectorStoreBase,
    stream: BinaryIO,
    out: TextIO,
) -> list[QueryResult]:
    retriever = CodeRetriever(embedder, store, default_k=settings.query_k)
    results = retriever.search(stream.read().decode("utf-8", errors="replace"))
    out.write(_RESULTS.dump_json(results, indent=2).decode("utf-8"))
    out.write("\n")
    return results


def main(
    argv: list[str] | None = None,
    *,
    stdin: BinaryIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Run one mode and return the process exit status.

    *stdin* is read as bytes: index mode decodes each path line with the
    filesystem encoding, query mode decodes the question as UTF-8.

    Invalid mode selection exits with status 2 via argparse; fatal
    service errors return 1.
    """
    args = build_parser().parse_args(argv)
    stdin = stdin or sys.stdin.buffer
    stdout = stdout or sys.stdout

    try:
        settings = Settings()
    except ValidationError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error("Invalid configuration: %s", exc)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        logger.info("Connecting to services")
        embedder = get_embedding_gateway(settings)
        store = ChromaVectorStore.from_settings(settings)
        if not store.health_check():
            raise StoreError(f"vector store at {settings.chroma_host}:{settings.chroma_port} is not reachable")

        if args.mode == "index":
            run_index(settings, embedder, store, stdin)
        else:
            run_query(settings, embedder, store, stdin, stdout)
    except CxxragError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
