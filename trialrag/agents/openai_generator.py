"""
OpenAI chat-completion generator.
"""

from typing import Any, Dict, Optional

import openai
from openai import OpenAI

from .generator import ExternalGenerator, GenerationUnavailableError
from ..core.config import OPENAI_MODEL

EMPTY_RESPONSE = "No response generated."

# Failures that mean "the service cannot answer right now" rather than a bad request
UNAVAILABLE_ERRORS = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
    openai.APIConnectionError,  # includes APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
)


class OpenAIGenerator(ExternalGenerator):
    """
    Generator that sends the prompt as a single user message to the
    OpenAI chat completions API.
    """

    name = "openai"

    def __init__(self, api_key: Optional[str], model_name: str = OPENAI_MODEL,
                 timeout: Optional[float] = None, client: Optional[OpenAI] = None):
        if client is None and not api_key:
            raise GenerationUnavailableError("OpenAI API key is not configured")
        self.model_name = model_name
        self.timeout = timeout
        self.client = client or OpenAI(api_key=api_key, timeout=timeout)

    def generate(self, prompt: str, max_tokens: int) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
            )
        except UNAVAILABLE_ERRORS as e:
            raise GenerationUnavailableError(f"OpenAI unavailable: {e}") from e

        return response.choices[0].message.content or EMPTY_RESPONSE

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status.update({'model': self.model_name, 'timeout': self.timeout})
        return status
