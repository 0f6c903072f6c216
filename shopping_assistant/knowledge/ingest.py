"""One-time ingestion pass from the configured tabular source."""

from __future__ import annotations

import logging
from pathlib import Path

from shopping_assistant.core.errors import IngestionError

from .index import KnowledgeIndex
from .loader import load_csv_documents

logger = logging.getLogger("shopping.knowledge")


def ingest_from_source(index: KnowledgeIndex, source_path: Path | None, batch_size: int | None = None) -> int:
    """Clear the index and rebuild it from ``source_path``.

    Raises ``IngestionError`` on any failure; re-running is safe.
    """

    if source_path is None:
        raise IngestionError("No knowledge source configured")

    logger.info("Starting knowledge index initialization from %s", source_path)
    documents = load_csv_documents(Path(source_path))
    try:
        return index.ingest(documents, batch_size=batch_size)
    except IngestionError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise IngestionError(f"Knowledge ingestion failed: {exc}") from exc
