"""
Request and response models for the RAG service.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional

from ..core.config import RAG_DEFAULT_TOP_K, RAG_MAX_TOKENS
from ..vector.types import MetadataValue, SearchResult


class RAGQueryOptions(BaseModel):
    model_config = ConfigDict(extra='forbid')

    collection_name: str
    query: str
    top_k: int = RAG_DEFAULT_TOP_K
    filter: Dict[str, MetadataValue] = Field(default_factory=dict)
    include_content: bool = True
    max_tokens: int = RAG_MAX_TOKENS

    @field_validator('max_tokens')
    @classmethod
    def max_tokens_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('max_tokens must be >= 1')
        return v


class SourceDocument(BaseModel):
    id: str
    content: str
    metadata: Dict[str, Any]
    score: float

    @classmethod
    def from_result(cls, result: SearchResult) -> "SourceDocument":
        return cls(id=result.id, content=result.content, metadata=result.metadata, score=result.score)


class RAGResponse(BaseModel):
    answer: str
    source_documents: Optional[List[SourceDocument]] = None
    error: Optional[str] = None
