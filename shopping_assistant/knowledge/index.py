"""Similarity-searchable knowledge index backed by an in-process FAISS index."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Sequence

import faiss  # type: ignore
import numpy as np

from shopping_assistant.core.errors import IngestionError, RetrievalError

from .embeddings import IdfEmbedder
from .models import KnowledgeDocument, RetrievalResult, ScoredDocument

logger = logging.getLogger("shopping.knowledge")

DEFAULT_BATCH_SIZE = 100


class KnowledgeIndex(ABC):
    """Contract the orchestrator relies on for retrieval."""

    top_k: int
    similarity_threshold: float

    @abstractmethod
    def ingest(self, documents: Sequence[KnowledgeDocument], batch_size: int | None = None) -> int:
        """Replace the whole corpus. Returns the number of indexed documents."""

    @abstractmethod
    def query(self, text: str, top_k: int | None = None) -> RetrievalResult:
        """Best matches at or above the similarity threshold, at most ``top_k``."""

    def is_ready(self) -> bool:
        """Trivial one-result probe. Failures mean "not ready" and never raise."""

        try:
            self.query("test", top_k=1)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Knowledge index not ready: %s", exc)
            return False
        return True


class FaissKnowledgeIndex(KnowledgeIndex):
    """Term-presence vectors in a ``faiss.IndexFlatIP``.

    A score is the IDF-weighted share of the query's known terms found in the
    document, so 1.0 means every meaningful query word matched.

    Ingestion and queries share one lock, so a query never observes a corpus
    that is half cleared or half loaded.
    """

    def __init__(
        self,
        *,
        top_k: int = 5,
        similarity_threshold: float = 0.7,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if top_k < 1:
            raise ValueError("top_k must be at least 1")
        if not 0.0 <= similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be between 0.0 and 1.0")
        self.top_k = top_k
        self.similarity_threshold = similarity_threshold
        self.batch_size = max(1, batch_size)
        self._lock = threading.RLock()
        self._index: faiss.Index | None = None
        self._embedder = IdfEmbedder()
        self._documents: list[KnowledgeDocument] = []

    @property
    def document_count(self) -> int:
        with self._lock:
            return len(self._documents)

    def ingest(self, documents: Sequence[KnowledgeDocument], batch_size: int | None = None) -> int:
        size = max(1, batch_size or self.batch_size)
        with self._lock:
            logger.info("Clearing existing knowledge index data...")
            self._index = None
            self._documents = []
            self._embedder = IdfEmbedder()

            if not documents:
                logger.warning("No documents to ingest. Knowledge index will be empty.")
                return 0

            embedder = IdfEmbedder().fit([doc.text for doc in documents])
            if embedder.dimension == 0:
                logger.warning("Documents contain no indexable tokens. Knowledge index will be empty.")
                return 0

            index = faiss.IndexFlatIP(embedder.dimension)
            indexed: list[KnowledgeDocument] = []
            total_batches = (len(documents) + size - 1) // size
            logger.info("Indexing %s documents into knowledge index...", len(documents))

            for number, start in enumerate(range(0, len(documents), size), start=1):
                batch = list(documents[start : start + size])
                logger.debug("Processing batch %s/%s (%s documents)", number, total_batches, len(batch))
                try:
                    self._add_batch(index, embedder.transform_documents([doc.text for doc in batch]))
                except Exception as exc:  # noqa: BLE001
                    logger.error("Failed to index batch %s/%s: %s", number, total_batches, exc)
                    raise IngestionError(f"Failed to index batch {number}/{total_batches}: {exc}") from exc
                indexed.extend(batch)
                logger.info("Indexed batch %s/%s", number, total_batches)

            self._index = index
            self._embedder = embedder
            self._documents = indexed
            logger.info("Knowledge index initialization complete. Indexed %s documents.", len(indexed))
            return len(indexed)

    def _add_batch(self, index: faiss.Index, vectors: np.ndarray) -> None:
        index.add(vectors)

    def query(self, text: str, top_k: int | None = None) -> RetrievalResult:
        limit = self.top_k if top_k is None else top_k
        result = RetrievalResult(query=text)
        if limit < 1 or not text.strip():
            return result

        with self._lock:
            if self._index is None or not self._documents:
                return result
            try:
                vector = self._embedder.transform_query(text)
                if not vector.any():
                    return result
                scores, indices = self._index.search(vector, min(limit, len(self._documents)))
            except Exception as exc:  # noqa: BLE001
                raise RetrievalError(f"Knowledge index query failed: {exc}") from exc

            for idx, score in zip(indices[0], scores[0], strict=True):
                if idx < 0 or idx >= len(self._documents):
                    continue
                if float(score) < self.similarity_threshold:
                    continue
                result.matches.append(ScoredDocument(document=self._documents[idx], score=float(score)))

        logger.debug("Found %s results for query: '%s'", len(result), text)
        return result
