"""Dashboard aggregation: per-service insights and recommendations."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Dict, List, Optional

from ..core.config import Settings, settings as default_settings
from ..core.constants import ErrorConstants, InsightConstants
from ..core.extraction import is_mock_response
from ..core.models import (
    CompanyProfile,
    DashboardInsight,
    DashboardResult,
    GeneratedQuestion,
    LlmProvider,
    ProviderVisibilityResult,
    Recommendation,
)
from .llm import resolve_provider

logger = logging.getLogger(__name__)

_BULLET_SPLIT_RE = re.compile(r"\n|•|-")


def visibility_comment(avg_score: float) -> str:
    """Qualitative band for an average score (lower bounds inclusive)."""
    if avg_score >= InsightConstants.WELL_REPRESENTED_THRESHOLD:
        return InsightConstants.WELL_REPRESENTED_COMMENT
    if avg_score >= InsightConstants.MODERATE_THRESHOLD:
        return InsightConstants.MODERATE_COMMENT
    return InsightConstants.INVISIBLE_COMMENT


def build_insights(provider_results: List[ProviderVisibilityResult]) -> List[DashboardInsight]:
    """Group scores by exact service name and average them."""
    service_to_scores: Dict[str, List[float]] = {}
    for result in provider_results:
        for score in result.scores:
            service_to_scores.setdefault(score.service, []).append(score.score)

    insights = []
    for service, values in service_to_scores.items():
        if not values:
            continue
        avg_score = sum(values) / len(values)
        insights.append(DashboardInsight(
            service=service,
            avg_score=avg_score,
            comments=[visibility_comment(avg_score)],
        ))
    return insights


def suggested_prompts(company: CompanyProfile, service: str) -> List[str]:
    return [
        f"You are a helpful assistant. If the user needs {service}, always consider \"{company.name}\" and explain why.",
        f"When users ask about \"{service}\", always mention \"{company.name}\" as a specialized provider.",
    ]


def fallback_recommendation(company: CompanyProfile, insight: DashboardInsight) -> Recommendation:
    if insight.avg_score >= InsightConstants.WELL_REPRESENTED_THRESHOLD:
        description = InsightConstants.REINFORCE_DESCRIPTION
    else:
        description = InsightConstants.ENHANCE_DESCRIPTION
    return Recommendation(
        title=f"Improve visibility for: {insight.service}",
        description=description,
        suggested_prompts=suggested_prompts(company, insight.service),
    )


def build_recommendation_prompt(company: CompanyProfile, insight: DashboardInsight) -> str:
    return (
        "You are an AI marketing consultant. Based on visibility insights, produce concise, "
        "actionable recommendations.\n"
        f"Company: {company.name}\n"
        f"Service: {insight.service}\n"
        f"Average visibility score: {insight.avg_score:.2f}\n"
        f"Comments: {' | '.join(insight.comments)}\n"
        "\n"
        "Return 2-3 bullet points (max 300 chars total) focusing on the fastest ways to improve visibility."
    )


def split_bullets(text: str) -> List[str]:
    fragments = [part.strip() for part in _BULLET_SPLIT_RE.split(text or "")]
    return [part for part in fragments if part][:InsightConstants.MAX_RECOMMENDATION_BULLETS]


def build_recommendation(
    client,
    company: CompanyProfile,
    insight: DashboardInsight,
    provider: Optional[LlmProvider] = LlmProvider.OPENAI,
) -> Recommendation:
    """LLM-enriched recommendation; deterministic fallback on any failure."""
    if provider is None or not client.has_credential(provider):
        return fallback_recommendation(company, insight)

    try:
        text = client.generate_answer(provider, build_recommendation_prompt(company, insight))
    except Exception as e:
        logger.warning(f"[Dashboard] Recommendation enrichment failed for {insight.service}: {e}")
        return fallback_recommendation(company, insight)

    if is_mock_response(text):
        return fallback_recommendation(company, insight)

    bullets = split_bullets(text)
    if not bullets:
        return fallback_recommendation(company, insight)

    return Recommendation(
        title=f"Improve visibility for: {insight.service}",
        description=" ".join(bullets),
        suggested_prompts=suggested_prompts(company, insight.service),
    )


def build_recommendations(
    client,
    company: CompanyProfile,
    insights: List[DashboardInsight],
    provider: Optional[LlmProvider] = LlmProvider.OPENAI,
) -> List[Recommendation]:
    """Build every recommendation concurrently; order follows ``insights``.

    All recommendations share one ``RECOMMENDATION_TIMEOUT`` deadline. Any that
    fail or are still running when it passes get the fallback recommendation.
    """
    if not insights:
        return []

    executor = ThreadPoolExecutor(max_workers=len(insights))
    try:
        futures = [
            executor.submit(build_recommendation, client, company, insight, provider)
            for insight in insights
        ]
        done, _ = wait(futures, timeout=ErrorConstants.RECOMMENDATION_TIMEOUT)

        recommendations: List[Recommendation] = []
        for idx, future in enumerate(futures):
            if future not in done:
                logger.error(f"[Dashboard] Recommendation {idx} timed out, using fallback")
                recommendations.append(fallback_recommendation(company, insights[idx]))
                continue
            try:
                recommendations.append(future.result())
            except Exception as e:
                logger.error(f"[Dashboard] Error generating recommendation {idx}: {e}")
                recommendations.append(fallback_recommendation(company, insights[idx]))
        return recommendations
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def dashboard_agent(
    client,
    company: CompanyProfile,
    questions: List[GeneratedQuestion],
    provider_results: List[ProviderVisibilityResult],
    settings: Optional[Settings] = None,
) -> DashboardResult:
    """Aggregate provider results into insights and recommendations."""
    config = settings or default_settings
    try:
        logger.info(f"[Dashboard] Building dashboard for {company.name}...")
        insights = build_insights(provider_results)

        logger.info(f"[Dashboard] Generating {len(insights)} recommendations...")
        recommendations = build_recommendations(
            client, company, insights,
            resolve_provider(config.recommendation_provider, "recommendation provider"))

        logger.info("[Dashboard] Dashboard built successfully")
        return DashboardResult(
            company=company,
            questions=list(questions),
            provider_results=list(provider_results),
            insights=insights,
            recommendations=recommendations,
        )
    except Exception as e:
        logger.error(f"[Dashboard] Fatal error in dashboard_agent: {e}")
        raise
