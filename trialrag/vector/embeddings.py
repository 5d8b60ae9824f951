"""
Deterministic text embeddings for the in-memory vector store.

The hash embedding is a placeholder for a real embedding model. It only maps
identical text to identical vectors: SHA-256 avalanche means two texts that
differ by one character share no structure, so similarity scores between
different texts carry no semantic meaning.
"""

from abc import ABC, abstractmethod
import hashlib

import numpy as np

from ..core.config import VECTOR_DIMENSION

# Offsets into the 64-character hex digest; each window is 8 characters wide.
HASH_WINDOW_OFFSETS = 32
HASH_WINDOW_WIDTH = 8
HASH_WINDOW_MAX = 16 ** HASH_WINDOW_WIDTH - 1


def _utf8_bytes(text: str) -> bytes:
    """UTF-8 bytes of text, with each lone surrogate hashed as U+FFFD."""
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError:
        # A UTF-16 round trip joins surrogate pairs and replaces each unpaired one
        repaired = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace")
        return repaired.encode("utf-8")


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    def embed(self, text: str) -> np.ndarray:
        """Embed text into a read-only float64 array."""
        vector = np.asarray(self.embed_text(text), dtype=np.float64)
        vector.flags.writeable = False
        return vector


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Hash-based embedding provider.

    Dimension i is the 8-hex-character window of the SHA-256 digest starting
    at offset ``i % 32``, read as an unsigned integer and rescaled linearly
    from [0, 16**8 - 1] to [-1, 1]. The vector therefore repeats with
    period 32.
    """

    def __init__(self, dimension: int = VECTOR_DIMENSION):
        self.dimension = dimension

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector using SHA-256."""
        hex_dig = hashlib.sha256(_utf8_bytes(text)).hexdigest()

        windows = np.array(
            [
                int(hex_dig[offset:offset + HASH_WINDOW_WIDTH], 16)
                for offset in range(HASH_WINDOW_OFFSETS)
            ],
            dtype=np.float64,
        )
        scaled = windows / HASH_WINDOW_MAX * 2 - 1

        repeats = -(-self.dimension // HASH_WINDOW_OFFSETS)
        return np.tile(scaled, repeats)[:self.dimension].tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


_default_provider = DeterministicHashEmbedding()


def embed(text: str, dimension: int = VECTOR_DIMENSION) -> np.ndarray:
    """Embed text with the hash scheme at the given dimension."""
    provider = _default_provider if dimension == _default_provider.dimension else DeterministicHashEmbedding(dimension)
    return provider.embed(text)


text_to_vector = embed
