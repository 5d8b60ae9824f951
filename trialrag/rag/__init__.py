"""
Retrieval augmented generation over the in-memory vector store.
"""

from .service import RetrievalAugmentedQueryService
from .schemas import RAGQueryOptions, RAGResponse, SourceDocument
from .prompts import NO_RESULTS_ANSWER, ERROR_ANSWER
from .ingestion import (
    build_record_documents,
    build_study_summary_document,
    import_study_data,
    ingest_study_records,
)

__all__ = [
    'RetrievalAugmentedQueryService',
    'RAGQueryOptions',
    'RAGResponse',
    'SourceDocument',
    'NO_RESULTS_ANSWER',
    'ERROR_ANSWER',
    'build_record_documents',
    'build_study_summary_document',
    'ingest_study_records',
    'import_study_data'
]
