"""
Fixed answers and prompt templates for the RAG service.
"""

from typing import List

from ..vector.types import SearchResult

NO_RESULTS_ANSWER = "I couldn't find any relevant information in the database to answer your query."
ERROR_ANSWER = "An error occurred while processing your query."

CONTEXT_ENTRY_TEMPLATE = "Document: {content}\nRelevance: {score:.2f}\n"

ANSWER_PROMPT_TEMPLATE = """You are an AI assistant for clinical trial management.
Answer the following question based ONLY on the provided context documents.
If the context doesn't contain relevant information to answer the question,
state that you don't have enough information.

Context:
{context}

Question: {query}

Answer:"""


def build_context(results: List[SearchResult]) -> str:
    """Render ranked results into the context block, blank-line separated."""
    return "\n".join(
        CONTEXT_ENTRY_TEMPLATE.format(content=result.content, score=result.score)
        for result in results
    )


def build_prompt(context: str, query: str) -> str:
    return ANSWER_PROMPT_TEMPLATE.format(context=context, query=query)
