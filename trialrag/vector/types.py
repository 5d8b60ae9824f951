"""
Record types shared by the vector store and the RAG service.
"""

from dataclasses import dataclass, field
from typing import Dict, Union

import numpy as np

# Metadata values are flat scalars; filters compare them for exact equality.
MetadataValue = Union[str, int, float, bool, None]
MetadataFilter = Dict[str, MetadataValue]


@dataclass
class Document:
    """A stored document with its derived embedding."""

    id: str
    """Unique identifier, global across all collections"""

    content: str
    """Text payload the vector was derived from"""

    vector: np.ndarray
    """Read-only embedding of `content`"""

    metadata: Dict[str, MetadataValue] = field(default_factory=dict)
    """Flat key/value metadata used for filtering"""


@dataclass
class SearchResult:
    """Represents a search result from the vector store."""

    id: str
    content: str
    metadata: Dict[str, MetadataValue]
    score: float
    """Cosine similarity to the query, in [-1, 1]"""
