"""
Models module for LLM client abstraction.

Provides the single generation call used by the interview orchestrator.
"""

from hirelytics_interview.models.llm_client import (
    DEFAULT_OLLAMA_MODEL,
    GenerationRequest,
    GenerationResult,
    LLMClient,
    LLMClientBase,
    LLMError,
)

__all__ = [
    "DEFAULT_OLLAMA_MODEL",
    "GenerationRequest",
    "GenerationResult",
    "LLMClient",
    "LLMClientBase",
    "LLMError",
]
