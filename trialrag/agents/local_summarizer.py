"""
Deterministic local answer strategy.
Used when no external generator is configured, or when it is unavailable.
"""

from typing import Any, Dict, List

from .generator import AnswerGenerator
from ..vector.types import SearchResult

SUMMARY_HEADER = "Based on the retrieved documents, here's what I found:"
SUMMARY_NOTE = "Note: For more advanced analysis, please configure an OpenAI API key."


class LocalFallbackSummarizer(AnswerGenerator):
    """
    Bullets the top documents verbatim. Ignores the prompt and the token budget.
    """

    name = "local"

    def __init__(self, max_documents: int = 3, max_chars: int = 200):
        self.max_documents = max_documents
        self.max_chars = max_chars

    def generate_answer(self, prompt: str, documents: List[SearchResult], max_tokens: int) -> str:
        bullets = "\n\n".join(
            f"- {self._truncate(doc.content)}" for doc in documents[:self.max_documents]
        )
        return f"{SUMMARY_HEADER}\n\n{bullets}\n\n{SUMMARY_NOTE}"

    def _truncate(self, content: str) -> str:
        if len(content) > self.max_chars:
            return content[:self.max_chars] + "..."
        return content

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status.update({
            'max_documents': self.max_documents,
            'max_chars': self.max_chars
        })
        return status
