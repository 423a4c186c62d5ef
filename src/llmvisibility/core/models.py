"""Data models for LLM Visibility."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List


class LlmProvider(Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


# Fixed preference order used when falling back to any credentialed provider
PROVIDER_PREFERENCE = [LlmProvider.OPENAI, LlmProvider.ANTHROPIC, LlmProvider.GEMINI]


class QuestionIntent(Enum):
    FIND_SERVICE = "find_service"
    EVALUATE_COMPANY = "evaluate_company"
    COMPARE_OPTIONS = "compare_options"
    PRICING = "pricing"
    REVIEWS = "reviews"
    FEATURES = "features"
    ALTERNATIVES = "alternatives"


VALID_INTENTS = tuple(intent.value for intent in QuestionIntent)


@dataclass(frozen=True)
class CompanyProfile:
    """Company whose visibility is analyzed."""
    name: str
    description: str
    services: List[str]
    website: Optional[str] = None
    target_locales: Optional[List[str]] = None


@dataclass(frozen=True)
class GeneratedQuestion:
    """A customer-style question sent to every provider."""
    id: str
    text: str
    language: str
    intent: str


@dataclass(frozen=True)
class LlmRawAnswer:
    """Raw answer returned by one provider for one question."""
    question_id: str
    question: str
    answer: str


@dataclass(frozen=True)
class ScoringBreakdown:
    """Seven-factor evaluation of how an answer treats the company."""
    mention_presence: float = 0.0
    mention_count: float = 0
    mention_context: float = 0.0
    mention_position: float = 0.0
    description_detail: float = 0.0
    answer_relevance: float = 0.0
    service_match: float = 0.0
    rationale: str = ""


@dataclass(frozen=True)
class ScoringWeights:
    """Weights for the six bounded scoring factors."""
    mention_presence: float
    mention_context: float
    mention_position: float
    description_detail: float
    answer_relevance: float
    service_match: float


@dataclass(frozen=True)
class VisibilityScore:
    """Normalized visibility score for one provider and service."""
    provider: LlmProvider
    service: str
    score: float
    rationale: str


@dataclass(frozen=True)
class VisibilityScoringResult:
    """Outcome of scoring a single answer."""
    score: float
    rationale: str
    breakdown: Optional[ScoringBreakdown] = None
    method: str = "heuristic"  # "llm" or "heuristic"


@dataclass
class ProviderVisibilityResult:
    """All answers and scores collected from one provider."""
    provider: LlmProvider
    answers: List[LlmRawAnswer] = field(default_factory=list)
    scores: List[VisibilityScore] = field(default_factory=list)


@dataclass
class DashboardInsight:
    """Aggregated view of one service across providers and questions."""
    service: str
    avg_score: float
    comments: List[str]


@dataclass
class Recommendation:
    """Suggestion for improving visibility of one service."""
    title: str
    description: str
    suggested_prompts: List[str]


@dataclass
class DashboardResult:
    """Full result of one analysis run."""
    company: CompanyProfile
    questions: List[GeneratedQuestion]
    provider_results: List[ProviderVisibilityResult]
    insights: List[DashboardInsight]
    recommendations: List[Recommendation]
