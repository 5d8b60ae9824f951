"""
Runtime configuration for the trial vector store and RAG service.
Values come from the environment (a local .env file is honoured).
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

# Vector store configuration
VECTOR_DIMENSION = int(os.getenv("VECTOR_DIMENSION", "384"))
VECTOR_DEFAULT_TOP_K = int(os.getenv("VECTOR_DEFAULT_TOP_K", "10"))

# RAG configuration
RAG_DEFAULT_TOP_K = int(os.getenv("RAG_DEFAULT_TOP_K", "5"))
RAG_MAX_TOKENS = int(os.getenv("RAG_MAX_TOKENS", "500"))
TRIAL_DATA_COLLECTION = os.getenv("TRIAL_DATA_COLLECTION", "clinical-trial-data")

# Text generation configuration
GENERATOR_PROVIDER = os.getenv("GENERATOR_PROVIDER", "auto")  # auto|openai|ollama|local
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3")
OLLAMA_HOST = os.getenv("OLLAMA_HOST")
GENERATION_TIMEOUT_SEC = float(os.getenv("GENERATION_TIMEOUT_SEC", "30"))

VALID_GENERATOR_PROVIDERS = ["auto", "openai", "ollama", "local"]

# Version string
VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_generator_provider() -> str:
    """Get the configured generator provider (auto|openai|ollama|local)."""
    return os.getenv("GENERATOR_PROVIDER", GENERATOR_PROVIDER).lower()


def get_openai_api_key() -> Optional[str]:
    """OpenAI credential, or None when not configured."""
    return os.getenv("OPENAI_API_KEY") or None


def get_generation_timeout() -> Optional[float]:
    """Generation timeout in seconds; 0 or less disables it."""
    timeout = float(os.getenv("GENERATION_TIMEOUT_SEC", str(GENERATION_TIMEOUT_SEC)))
    return timeout if timeout > 0 else None


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    from trialrag.vector.embeddings import DeterministicHashEmbedding
    return DeterministicHashEmbedding(dimension=VECTOR_DIMENSION)


def get_vector_store():
    """Get configured vector store implementation."""
    from trialrag.vector.index import InMemoryVectorStore
    return InMemoryVectorStore(embedding_provider=get_embedding_provider())


def get_answer_generator():
    """
    Pick the answer generator once, from the environment.

    auto uses OpenAI when OPENAI_API_KEY is set and the local summarizer
    otherwise. An explicit openai provider without a key also degrades to the
    local summarizer.
    """
    from trialrag.agents.local_summarizer import LocalFallbackSummarizer

    provider = get_generator_provider()
    api_key = get_openai_api_key()

    if provider == "ollama":
        from trialrag.agents.ollama_generator import OllamaGenerator
        return OllamaGenerator(
            model_name=os.getenv("OLLAMA_MODEL", OLLAMA_MODEL),
            host=os.getenv("OLLAMA_HOST", OLLAMA_HOST),
        )

    if provider in ("auto", "openai") and api_key:
        from trialrag.agents.openai_generator import OpenAIGenerator
        return OpenAIGenerator(
            api_key=api_key,
            model_name=os.getenv("OPENAI_MODEL", OPENAI_MODEL),
            timeout=get_generation_timeout(),
        )

    return LocalFallbackSummarizer()


def validate_generation_config() -> List[str]:
    """Validate generation configuration and return any issues."""
    issues = []
    provider = get_generator_provider()

    if provider not in VALID_GENERATOR_PROVIDERS:
        issues.append(f"Invalid GENERATOR_PROVIDER: {provider}")

    if provider == "openai" and not get_openai_api_key():
        issues.append("GENERATOR_PROVIDER=openai requires OPENAI_API_KEY")

    if VECTOR_DIMENSION < 1:
        issues.append("VECTOR_DIMENSION must be >= 1")

    if RAG_MAX_TOKENS < 1:
        issues.append("RAG_MAX_TOKENS must be >= 1")

    return issues
