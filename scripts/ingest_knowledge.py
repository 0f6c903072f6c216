"""Validate a knowledge CSV and probe retrieval against an in-process FAISS index."""

from __future__ import annotations

import argparse
from pathlib import Path

from shopping_assistant.core.config import get_settings
from shopping_assistant.knowledge.context import format_context
from shopping_assistant.knowledge.index import FaissKnowledgeIndex
from shopping_assistant.knowledge.loader import load_csv_documents


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Ingest a knowledge CSV and run a probe query")
    parser.add_argument(
        "--source",
        type=Path,
        default=settings.knowledge_source_path,
        help="CSV file with a header row; one document per data row.",
    )
    parser.add_argument(
        "--query",
        default=None,
        help="Probe query to run after ingestion.",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=settings.retrieval_top_k,
        help="Maximum number of matches to print.",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=settings.similarity_threshold,
        help="Minimum similarity score (0.0-1.0).",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.ingest_batch_size,
        help="Documents indexed per batch.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse the CSV and print the documents without building an index.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    documents = load_csv_documents(args.source)
    print(f"Loaded {len(documents)} documents from {args.source}")

    if args.dry_run:
        for document in documents[:5]:
            print(f"  row {document.metadata.get('row_number')}: {document.text}")
        print("Dry-run enabled; skipping index build")
        return

    index = FaissKnowledgeIndex(
        top_k=args.top_k,
        similarity_threshold=args.threshold,
        batch_size=args.batch_size,
    )
    count = index.ingest(documents)
    print(f"Indexed {count} documents")

    if args.query:
        result = index.query(args.query)
        for match in result:
            print(f"  {match.score:.3f}  {match.document.text}")
        context = format_context(result)
        print(context or "No matches above the similarity threshold.")


if __name__ == "__main__":
    main()
