"""Services for LLM Visibility."""

from .llm import LLMClient, LLMClientFactory
from .pipeline import run_visibility_flow

__all__ = [
    "LLMClient",
    "LLMClientFactory",
    "run_visibility_flow",
]
