"""
Ollama-based generator that talks to a local Ollama instance.
"""

from typing import Any, Dict, Optional

import ollama

from .generator import ExternalGenerator, GenerationUnavailableError
from ..core.config import OLLAMA_MODEL


class OllamaGenerator(ExternalGenerator):
    """
    Generator implementation that uses Ollama models.
    Connection failures and a missing model count as unavailable.
    """

    name = "ollama"

    def __init__(self, model_name: str = OLLAMA_MODEL, host: Optional[str] = None,
                 client: Optional[ollama.Client] = None):
        self.model_name = model_name
        self.host = host
        self.client = client or ollama.Client(host=host)

    def generate(self, prompt: str, max_tokens: int) -> str:
        try:
            response = self.client.chat(
                model=self.model_name,
                messages=[{'role': 'user', 'content': prompt}],
                options={'num_predict': max_tokens}
            )
        except ConnectionError as e:
            raise GenerationUnavailableError(f"Ollama unreachable: {e}") from e
        except ollama.ResponseError as e:
            if e.status_code == 404:
                raise GenerationUnavailableError(f"Ollama model '{self.model_name}' not available: {e.error}") from e
            raise

        return response.get('message', {}).get('content', '')

    def get_status(self) -> Dict[str, Any]:
        """Get current status with Ollama-specific information."""
        status = super().get_status()
        status.update({
            'model': self.model_name,
            'ollama_available': check_ollama_health(self.client)
        })
        return status


def check_ollama_health(client: Optional[ollama.Client] = None) -> bool:
    """
    Check Ollama service reachability.
    """
    try:
        (client or ollama).list()
        return True
    except Exception:
        return False
