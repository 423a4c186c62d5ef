"""Core modules for LLM Visibility."""

from .models import *
from .config import settings
from .extraction import extract_questions, extract_scoring, is_mock_response, ParsedOk, ParsedError
from .validation import validate_questions, ValidationConfig
from .scoring import (
    DEFAULT_SCORING_WEIGHTS,
    calculate_visibility_score,
    heuristic_score,
    normalize_breakdown,
)

__all__ = [
    "settings",
    "LlmProvider",
    "QuestionIntent",
    "CompanyProfile",
    "GeneratedQuestion",
    "LlmRawAnswer",
    "ScoringBreakdown",
    "ScoringWeights",
    "VisibilityScore",
    "ProviderVisibilityResult",
    "DashboardInsight",
    "Recommendation",
    "DashboardResult",
    "ParsedOk",
    "ParsedError",
    "ValidationConfig",
    "DEFAULT_SCORING_WEIGHTS",
    "extract_questions",
    "extract_scoring",
    "is_mock_response",
    "validate_questions",
    "normalize_breakdown",
    "calculate_visibility_score",
    "heuristic_score",
]
