"""Term-weight embeddings for the knowledge index.

Documents become term-presence vectors and queries become IDF weights
summing to one, so the inner product of the two is the IDF-weighted share
of the query's known terms that the document contains (0.0-1.0). A row that
mentions every meaningful word of the question scores 1.0.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import Sequence

import numpy as np

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")

STOP_WORDS = frozenset(
    """
    a about an and any are as at be by can could do does for from have has how
    i if in is it its me my of on or our please should so that the their them
    there these this to us was we what when where which who why will with would
    you your
    """.split()
)


def tokenize(text: str) -> list[str]:
    return [token for token in TOKEN_PATTERN.findall(text.lower()) if token not in STOP_WORDS]


class IdfEmbedder:
    """Vocabulary and inverse document frequencies fitted on the indexed corpus."""

    def __init__(self) -> None:
        self.vocabulary: list[str] = []
        self._token_index: dict[str, int] = {}
        self.idf: np.ndarray = np.array([], dtype=np.float32)

    @property
    def dimension(self) -> int:
        return len(self.vocabulary)

    def fit(self, texts: Sequence[str]) -> "IdfEmbedder":
        doc_freq: Counter[str] = Counter()
        for text in texts:
            doc_freq.update(set(tokenize(text)))

        self.vocabulary = sorted(doc_freq)
        self._token_index = {token: idx for idx, token in enumerate(self.vocabulary)}

        total_docs = len(texts)
        idf = np.zeros(len(self.vocabulary), dtype=np.float32)
        for token, idx in self._token_index.items():
            idf[idx] = math.log((1 + total_docs) / (1 + doc_freq[token])) + 1.0
        self.idf = idf
        return self

    def transform_documents(self, texts: Sequence[str]) -> np.ndarray:
        """One 0/1 row per text marking which vocabulary terms it contains."""

        embeddings = np.zeros((len(texts), self.dimension), dtype=np.float32)
        for row, text in enumerate(texts):
            for token in set(tokenize(text)):
                idx = self._token_index.get(token)
                if idx is not None:
                    embeddings[row, idx] = 1.0
        return embeddings

    def transform_query(self, text: str) -> np.ndarray:
        """IDF weights of the query's known terms, scaled to sum to 1.

        Terms outside the vocabulary are ignored; a query with none left is
        the zero vector.
        """

        embedding = np.zeros((1, self.dimension), dtype=np.float32)
        for token in set(tokenize(text)):
            idx = self._token_index.get(token)
            if idx is not None:
                embedding[0, idx] = self.idf[idx]

        total = float(embedding.sum())
        if total > 0:
            embedding /= total
        return embedding
