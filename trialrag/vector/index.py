"""
In-memory vector store: named collections over one global document map,
with exact brute-force cosine search.
"""

from abc import ABC, abstractmethod
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np

from .embeddings import DeterministicHashEmbedding, IEmbeddingProvider
from .types import Document, MetadataFilter, MetadataValue, SearchResult
from ..core.config import VECTOR_DEFAULT_TOP_K
from util.logging import logger

QueryInput = Union[str, Sequence[float], np.ndarray]


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity of two vectors; 0.0 when either has zero magnitude."""
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def _values_equal(expected: MetadataValue, actual: Any) -> bool:
    # bool is an int subclass; True must not match 1
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected is actual
    return expected == actual


def matches_filter(metadata: Mapping[str, Any], filter: Optional[MetadataFilter]) -> bool:
    """
    Exact-match metadata filter.

    Every filter key must be present in the metadata with an equal value.
    There are no substring, range or nested-object operators.
    """
    if not filter:
        return True
    for key, expected in filter.items():
        if key not in metadata or not _values_equal(expected, metadata[key]):
            return False
    return True


class IVectorStore(ABC):
    """Abstract interface for collection-based vector storage."""

    @abstractmethod
    def create_collection(self, name: str) -> None:
        """Create a collection; no-op if it exists."""
        pass

    @abstractmethod
    def delete_collection(self, name: str) -> bool:
        """Delete a collection and its documents. False if unknown."""
        pass

    @abstractmethod
    def list_collections(self) -> List[str]:
        """Names of all collections."""
        pass

    @abstractmethod
    def upsert(self, collection_name: str, documents: Iterable[Mapping[str, Any]]) -> List[str]:
        """Insert or overwrite documents, returning their ids in input order."""
        pass

    @abstractmethod
    def delete(self, collection_name: str, ids: Iterable[str]) -> List[str]:
        """Delete documents from a collection, returning the ids removed."""
        pass

    @abstractmethod
    def query(self, collection_name: str, query: QueryInput, top_k: int = VECTOR_DEFAULT_TOP_K,
              filter: Optional[MetadataFilter] = None) -> List[SearchResult]:
        """Search a collection and return ranked results."""
        pass

    @abstractmethod
    def get(self, id: str) -> Optional[Document]:
        """Fetch a document by id, or None."""
        pass

    @abstractmethod
    def count(self, collection_name: str) -> int:
        """Number of documents in a collection, 0 if unknown."""
        pass


class InMemoryVectorStore(IVectorStore):
    """
    Process-local vector store.

    Documents live in one map keyed by id; a collection is an insertion-ordered
    set of ids (a dict with None values). Documents are removed entirely when
    deleted from a collection or when their collection is deleted, and their
    ids are purged from every other collection at the same time.

    One re-entrant lock guards both maps. Embeddings are computed before the
    lock is taken.
    """

    def __init__(self, embedding_provider: Optional[IEmbeddingProvider] = None):
        self.embedding_provider = embedding_provider or DeterministicHashEmbedding()
        self.dimension = self.embedding_provider.get_dimension()
        self._documents: Dict[str, Document] = {}
        self._collections: Dict[str, Dict[str, None]] = {}
        self._lock = threading.RLock()

    def embed(self, text: str) -> np.ndarray:
        """Embed text with this store's provider."""
        return self.embedding_provider.embed(text)

    def create_collection(self, name: str) -> None:
        with self._lock:
            if name in self._collections:
                logger.log_collection_operation("create", name, status="exists")
                return
            self._collections[name] = {}
        logger.log_collection_operation("create", name)

    def delete_collection(self, name: str) -> bool:
        with self._lock:
            member_ids = self._collections.pop(name, None)
            if member_ids is None:
                return False
            for doc_id in member_ids:
                self._remove_document(doc_id)
        logger.log_collection_operation("delete", name, {"documents_removed": len(member_ids)})
        return True

    def list_collections(self) -> List[str]:
        with self._lock:
            return list(self._collections)

    def upsert(self, collection_name: str, documents: Iterable[Mapping[str, Any]]) -> List[str]:
        # Build every document first so a malformed entry fails before any write
        prepared = []
        for doc in documents:
            content = doc["content"]
            if not isinstance(content, str):
                raise TypeError(f"Document '{doc['id']}' content must be a string, got {type(content).__name__}")
            vector = self.embed(content)
            if vector.shape != (self.dimension,):
                raise ValueError(
                    f"Document '{doc['id']}' embedding has shape {vector.shape}, expected ({self.dimension},)"
                )
            prepared.append(Document(
                id=doc["id"],
                content=content,
                vector=vector,
                metadata=dict(doc.get("metadata") or {}),
            ))

        with self._lock:
            if collection_name not in self._collections:
                self.create_collection(collection_name)

            collection = self._collections[collection_name]
            ids = []
            for document in prepared:
                self._documents[document.id] = document
                collection[document.id] = None
                ids.append(document.id)
                logger.log_vector_operation("upsert", document.id, {"collection": collection_name})

        logger.log_collection_operation("upsert", collection_name, {"documents": len(ids)})
        return ids

    def delete(self, collection_name: str, ids: Iterable[str]) -> List[str]:
        with self._lock:
            collection = self._collections.get(collection_name)
            if collection is None:
                return []

            deleted_ids = []
            for doc_id in ids:
                if doc_id in collection:
                    self._remove_document(doc_id)
                    deleted_ids.append(doc_id)
                    logger.log_vector_operation("delete", doc_id, {"collection": collection_name})
            return deleted_ids

    def query(self, collection_name: str, query: QueryInput, top_k: int = VECTOR_DEFAULT_TOP_K,
              filter: Optional[MetadataFilter] = None) -> List[SearchResult]:
        query_vector = self._to_query_vector(query)

        with self._lock:
            collection = self._collections.get(collection_name)
            if not collection or top_k <= 0:
                return []

            scored = []
            for doc_id in collection:
                doc = self._documents.get(doc_id)
                if doc is None or not matches_filter(doc.metadata, filter):
                    continue
                scored.append((cosine_similarity(query_vector, doc.vector), doc))

        # sorted() is stable: equal scores keep collection insertion order
        scored = sorted(scored, key=lambda item: item[0], reverse=True)[:top_k]

        return [
            SearchResult(id=doc.id, content=doc.content, metadata=dict(doc.metadata), score=score)
            for score, doc in scored
        ]

    def get(self, id: str) -> Optional[Document]:
        with self._lock:
            return self._documents.get(id)

    def get_many(self, ids: Iterable[str]) -> List[Document]:
        """Fetch the known documents among ids, in input order."""
        with self._lock:
            return [self._documents[doc_id] for doc_id in ids if doc_id in self._documents]

    def count(self, collection_name: str) -> int:
        with self._lock:
            return len(self._collections.get(collection_name, ()))

    def _remove_document(self, doc_id: str) -> None:
        # Caller holds the lock
        self._documents.pop(doc_id, None)
        for members in self._collections.values():
            members.pop(doc_id, None)

    def _to_query_vector(self, query: QueryInput) -> np.ndarray:
        if isinstance(query, str):
            return self.embed(query)

        vector = np.asarray(query, dtype=np.float64)
        if vector.shape != (self.dimension,):
            raise ValueError(f"Vector dimension {vector.shape} does not match expected dimension {self.dimension}")
        return vector
