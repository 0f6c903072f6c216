"""Turn a CSV file (header row + data rows) into knowledge documents."""

from __future__ import annotations

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path

from shopping_assistant.core.errors import IngestionError

from .models import KnowledgeDocument

logger = logging.getLogger("shopping.knowledge")


def format_row(record: dict[str, str]) -> str:
    """Render ``field: value | field: value`` over the non-blank fields."""

    return " | ".join(
        f"{key.strip()}: {value.strip()}"
        for key, value in record.items()
        if key and value is not None and value.strip()
    )


def load_csv_documents(path: Path) -> list[KnowledgeDocument]:
    """Read one document per data row. Rows with no non-blank field are skipped."""

    path = Path(path)
    logger.info("Loading CSV from: %s", path)
    if not path.is_file():
        raise IngestionError(f"Knowledge source not found at {path}")

    timestamp = datetime.now(timezone.utc).isoformat()
    documents: list[KnowledgeDocument] = []
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            reader = csv.DictReader(handle, skipinitialspace=True)
            for row_number, record in enumerate(reader, start=1):
                # DictReader puts surplus cells under the None key; format_row skips it
                content = format_row(record)
                if not content:
                    continue
                documents.append(
                    KnowledgeDocument(
                        text=content,
                        metadata={
                            "source": str(path),
                            "row_number": row_number,
                            "timestamp": timestamp,
                        },
                    )
                )
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise IngestionError(f"Could not read knowledge source {path}: {exc}") from exc

    logger.info("Loaded %s documents from CSV", len(documents))
    return documents
