#!/usr/bin/env python3
"""
Command-line RAG query utility.

Loads documents from a JSON file into a fresh in-memory collection, runs one
retrieval augmented query and prints the answer with its sources.
"""

import argparse
import json
import sys
from pathlib import Path

from trialrag.core import config
from trialrag.rag import RetrievalAugmentedQueryService
from util.logging import logger


def parse_filter(pairs):
    """Turn ["key=value", ...] into a metadata filter; values are read as JSON when possible."""
    metadata_filter = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Filter must look like key=value, got '{pair}'")
        try:
            metadata_filter[key] = json.loads(raw)
        except ValueError:
            metadata_filter[key] = raw
    return metadata_filter


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Ingest documents and run a retrieval augmented query",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --docs docs.json --query "aspirin"
  %(prog)s --docs docs.json --query "aspirin" --filter topic=medicine --top-k 3

The docs file holds a JSON list of {"id", "content", "metadata"} objects.

Environment variables:
- GENERATOR_PROVIDER=auto|openai|ollama|local (default auto)
- OPENAI_API_KEY=... (enables OpenAI under auto)
- GENERATION_TIMEOUT_SEC=30
        """
    )

    parser.add_argument(
        "--docs", "-d",
        required=True,
        help="JSON file with the documents to ingest"
    )

    parser.add_argument(
        "--query", "-q",
        required=True,
        help="Question to answer"
    )

    parser.add_argument(
        "--collection", "-c",
        default="docs",
        help="Collection to ingest into and query (default: docs)"
    )

    parser.add_argument(
        "--top-k", "-k",
        type=int,
        default=config.RAG_DEFAULT_TOP_K,
        help=f"Number of documents to retrieve (default: {config.RAG_DEFAULT_TOP_K})"
    )

    parser.add_argument(
        "--filter", "-f",
        action="append",
        metavar="KEY=VALUE",
        help="Exact-match metadata filter, repeatable"
    )

    parser.add_argument(
        "--no-sources",
        action="store_true",
        help="Do not print source documents"
    )

    args = parser.parse_args(argv)

    for issue in config.validate_generation_config():
        print(f"WARNING: {issue}")

    try:
        metadata_filter = parse_filter(args.filter)
        documents = json.loads(Path(args.docs).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    service = RetrievalAugmentedQueryService(config.get_vector_store())
    try:
        ids = service.ingest_documents(args.collection, documents)
    except (KeyError, TypeError) as e:
        print(f"ERROR: Invalid document in {args.docs}: {e}")
        return 1
    logger.info(f"Ingested {len(ids)} documents into '{args.collection}'")

    response = service.query({
        "collection_name": args.collection,
        "query": args.query,
        "top_k": args.top_k,
        "filter": metadata_filter,
        "include_content": not args.no_sources,
    })

    if response.error:
        print(f"ERROR: {response.error}")
        return 1

    print(response.answer)
    if response.source_documents:
        print()
        print("Sources:")
        for doc in response.source_documents:
            print(f"  [{doc.score:.2f}] {doc.id}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
