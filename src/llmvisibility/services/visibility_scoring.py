"""LLM-based visibility scoring with heuristic fallback.

Structured scoring asks a credentialed provider to rate how the company is
represented in an answer, then combines the ratings with the configured
weights. Every failure path (scoring disabled, no credentials, provider
errors, malformed output) returns the heuristic score instead of raising.
"""

import logging
from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from ..core.config import Settings, settings as default_settings
from ..core.extraction import MOCK_RESPONSE_ERROR, ParsedError, extract_scoring
from ..core.models import (
    PROVIDER_PREFERENCE,
    CompanyProfile,
    GeneratedQuestion,
    LlmProvider,
    ScoringWeights,
    VisibilityScoringResult,
)
from ..core.scoring import (
    DEFAULT_SCORING_WEIGHTS,
    calculate_visibility_score,
    load_weights_file,
    normalize_breakdown,
    parse_weights,
)
from .llm import resolve_provider

logger = logging.getLogger(__name__)

SCORING_PROMPT = dedent("""
You are an AI visibility analyst. Evaluate how well a company is represented in an AI assistant's answer.

Company Information:
- Name: {name}
- Description: {description}
- Services: {services}

User Question: "{question}"
AI Answer: "{answer}"

Evaluate the visibility of "{name}" in the answer and return a JSON object with this exact structure:
{{
  "mentionPresence": 0.0-1.0,
  "mentionCount": 0,
  "mentionContext": 0.0-1.0,
  "mentionPosition": 0.0-1.0,
  "descriptionDetail": 0.0-1.0,
  "answerRelevance": 0.0-1.0,
  "serviceMatch": 0.0-1.0,
  "rationale": "Brief explanation of the score"
}}

Rules:
- JSON only. No extra text.
- All scores must be numbers between 0.0 and 1.0.
- If company is not mentioned, mentionPresence must be 0.0.
""").strip()


@dataclass
class VisibilityScoringOptions:
    """Per-call overrides for visibility scoring."""
    provider: Optional[LlmProvider] = None
    weights: Optional[ScoringWeights] = None
    enable_scoring: Optional[bool] = None


def build_scoring_prompt(company: CompanyProfile, question: GeneratedQuestion, answer: str) -> str:
    return SCORING_PROMPT.format(
        name=company.name,
        description=company.description or "Not provided",
        services=", ".join(company.services),
        question=question.text,
        answer=answer,
    )


def select_scoring_provider(
    client,
    option_provider: Optional[LlmProvider],
    configured_provider: Optional[LlmProvider],
    answer_provider: LlmProvider,
) -> Optional[LlmProvider]:
    """Pick the provider used for structured scoring.

    Precedence: explicit option, configured default, the provider that produced
    the answer, then the first credentialed provider in preference order. Only
    providers with a credential qualify; None means heuristic scoring.
    """
    for candidate in (option_provider, configured_provider, answer_provider):
        candidate = resolve_provider(candidate, "scoring provider")
        if candidate is not None and client.has_credential(candidate):
            return candidate

    for candidate in PROVIDER_PREFERENCE:
        if client.has_credential(candidate):
            return candidate
    return None


def resolve_weights(options: Optional[VisibilityScoringOptions], config: Settings) -> ScoringWeights:
    if options is not None and options.weights is not None:
        return options.weights
    weights = parse_weights(config.visibility_scoring_weights)
    if weights is not None:
        return weights
    weights = load_weights_file(config.scoring_weights_file)
    if weights is not None:
        return weights
    return DEFAULT_SCORING_WEIGHTS


def score_answer_visibility(
    client,
    provider: LlmProvider,
    company: CompanyProfile,
    question: GeneratedQuestion,
    answer: str,
    heuristic_score: float,
    heuristic_rationale: str,
    options: Optional[VisibilityScoringOptions] = None,
    settings: Optional[Settings] = None,
) -> VisibilityScoringResult:
    """Score one answer, falling back to the supplied heuristic on any failure."""
    config = settings or default_settings
    fallback = VisibilityScoringResult(score=heuristic_score, rationale=heuristic_rationale)

    enable_scoring = options.enable_scoring if options and options.enable_scoring is not None \
        else config.visibility_scoring_enabled
    if not enable_scoring:
        return fallback

    scoring_provider = select_scoring_provider(
        client,
        options.provider if options else None,
        config.visibility_scoring_provider,
        provider,
    )
    if scoring_provider is None:
        logger.warning("Scoring unavailable (no provider with API key), using heuristic fallback")
        return fallback

    weights = resolve_weights(options, config)

    try:
        prompt = build_scoring_prompt(company, question, answer)
        response = client.generate_answer(scoring_provider, prompt)
        parsed = extract_scoring(response)
        if isinstance(parsed, ParsedError):
            if parsed.reason == MOCK_RESPONSE_ERROR:
                logger.warning(
                    f"Scoring unavailable ({scoring_provider.value} API key not configured), "
                    f"using heuristic fallback")
            else:
                logger.warning(f"Scoring parse failed, using heuristic: {parsed.reason}")
            return fallback

        breakdown = normalize_breakdown(parsed.value)
        score = calculate_visibility_score(breakdown, weights)
    except Exception as e:
        logger.error(f"Visibility scoring failed, using heuristic: {e}")
        return fallback

    return VisibilityScoringResult(
        score=score,
        rationale=breakdown.rationale or heuristic_rationale,
        breakdown=breakdown,
        method="llm",
    )
