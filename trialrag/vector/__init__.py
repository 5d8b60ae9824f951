"""
In-memory vector store with deterministic hash embeddings.
"""

# Package initialization for vector module
from .index import IVectorStore, InMemoryVectorStore, cosine_similarity, matches_filter
from .types import Document, SearchResult, MetadataFilter, MetadataValue
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, embed, text_to_vector

__all__ = [
    'IVectorStore',
    'InMemoryVectorStore',
    'cosine_similarity',
    'matches_filter',
    'Document',
    'SearchResult',
    'MetadataFilter',
    'MetadataValue',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'embed',
    'text_to_vector'
]
