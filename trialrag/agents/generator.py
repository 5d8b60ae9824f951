"""
Answer generation strategies for the RAG service.
An external generator turns a prompt into text; the local summarizer works
from the retrieved documents alone.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

from ..vector.types import SearchResult


class GenerationUnavailableError(RuntimeError):
    """The external text generator cannot be reached, is not configured, or timed out."""


class AnswerGenerator(ABC):
    """
    Abstract base class for answer strategies.
    The RAG service picks one at construction time.
    """

    name = "generator"

    @abstractmethod
    def generate_answer(self, prompt: str, documents: List[SearchResult], max_tokens: int) -> str:
        """
        Produce an answer.

        Args:
            prompt: Fully assembled prompt including context and question
            documents: Ranked retrieval results the prompt was built from
            max_tokens: Generation budget

        Returns:
            Answer text
        """
        pass

    def get_status(self) -> Dict[str, Any]:
        """Get current status of this generator."""
        return {'name': self.name, 'type': self.__class__.__name__}


class ExternalGenerator(AnswerGenerator):
    """
    Generator backed by an opaque text-generation call.
    Subclasses implement generate() and raise GenerationUnavailableError when
    the backing service cannot serve the request.
    """

    name = "external"

    @abstractmethod
    def generate(self, prompt: str, max_tokens: int) -> str:
        """Generate text for a prompt."""
        pass

    def generate_answer(self, prompt: str, documents: List[SearchResult], max_tokens: int) -> str:
        return self.generate(prompt, max_tokens)


class FunctionGenerator(ExternalGenerator):
    """Wraps a plain callable ``generate(prompt, max_tokens) -> str``."""

    name = "function"

    def __init__(self, generate_fn: Callable[[str, int], str]):
        self.generate_fn = generate_fn

    def generate(self, prompt: str, max_tokens: int) -> str:
        return self.generate_fn(prompt, max_tokens)
