"""
Builders that turn clinical trial records into vector store documents.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..core.config import TRIAL_DATA_COLLECTION
from util.logging import logger

SUMMARY_DOMAIN = "SUMMARY"
SUMMARY_RECORD_TYPE = "StudySummary"
DEFAULT_SUMMARY_SOURCE = "CTMS"


def _slug(text: str) -> str:
    return re.sub(r"\s+", "-", text.lower())


def record_to_content(record: Mapping[str, Any]) -> str:
    """Render a record as one "key: value" line per field."""
    return "\n".join(f"{key}: {value}" for key, value in record.items())


def build_record_documents(study_id: int, domain: str, data_source: str,
                           records: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    One document per domain record.

    Ids are ``<data-source-slug>_<domain>_<study_id>_<index>`` so re-importing
    the same batch overwrites rather than duplicates.
    """
    documents = []
    for index, record in enumerate(records):
        metadata = {
            "study_id": study_id,
            "domain": domain,
            "data_source": data_source,
        }
        if record.get("domain") is not None:
            metadata["record_type"] = record["domain"]
        if record.get("subjectId") is not None:
            metadata["subject_id"] = record["subjectId"]

        documents.append({
            "id": f"{_slug(data_source)}_{domain}_{study_id}_{index}",
            "content": record_to_content(record),
            "metadata": metadata,
        })
    return documents


def build_study_summary_document(summary: Mapping[str, Any]) -> Dict[str, Any]:
    """Document for a study-level summary; the summary must carry ``studyId``."""
    study_id = summary["studyId"]
    return {
        "id": f"study-summary-{study_id}",
        "content": record_to_content(summary),
        "metadata": {
            "study_id": study_id,
            "domain": SUMMARY_DOMAIN,
            "data_source": summary.get("dataSource", DEFAULT_SUMMARY_SOURCE),
            "record_type": SUMMARY_RECORD_TYPE,
        },
    }


def ingest_study_records(service, study_id: int, domain: str, data_source: str,
                         records: Sequence[Mapping[str, Any]],
                         collection_name: str = TRIAL_DATA_COLLECTION) -> List[str]:
    """Build documents for a batch of records and ingest them through the RAG service."""
    documents = build_record_documents(study_id, domain, data_source, records)
    return service.ingest_documents(collection_name, documents)


def default_study_summary(study_id: int) -> Dict[str, Any]:
    return {
        "studyId": study_id,
        "domain": SUMMARY_DOMAIN,
        "dataSource": DEFAULT_SUMMARY_SOURCE,
        "title": f"Study {study_id}",
    }


def import_study_data(service, study_id: int,
                      batches: Iterable[Tuple[str, str, Sequence[Mapping[str, Any]]]],
                      summary: Optional[Mapping[str, Any]] = None,
                      collection_name: str = TRIAL_DATA_COLLECTION) -> Dict[str, Any]:
    """
    Import one study into the RAG collection.

    Each batch is a ``(domain, data_source, records)`` tuple. After the batches
    the study summary document is ingested; without a summary a minimal one
    titled ``Study <id>`` is used.

    Returns:
        ``{"success": True, "documents_added", "studies_processed", "collection_name"}``
        or ``{"success": False, "error"}`` when any step fails
    """
    try:
        if collection_name not in service.list_collections():
            service.vector_store.create_collection(collection_name)
            logger.info(f"Created collection: {collection_name}")

        documents_added = 0
        for domain, data_source, records in batches:
            documents_added += len(ingest_study_records(
                service, study_id, domain, data_source, records, collection_name=collection_name
            ))

        summary_document = build_study_summary_document(summary or default_study_summary(study_id))
        documents_added += len(service.ingest_documents(collection_name, [summary_document]))

        logger.log_operation("trial.import", "success", {
            "study_id": study_id,
            "documents_added": documents_added,
            "collection": collection_name,
        })
        return {
            "success": True,
            "documents_added": documents_added,
            "studies_processed": 1,
            "collection_name": collection_name,
        }

    except Exception as e:
        logger.error(f"Error importing trial data for study {study_id}: {e}")
        return {"success": False, "error": str(e)}
