"""LLM Visibility - how visible a company is in AI assistant answers."""

__version__ = "1.0.0"
__author__ = "LLM Visibility Team"

from .core.models import *
from .core.config import settings
from .services.llm import LLMClientFactory
from .services.pipeline import run_visibility_flow

__all__ = [
    "settings",
    "LLMClientFactory",
    "run_visibility_flow",
]
