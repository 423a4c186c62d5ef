"""End-to-end visibility analysis."""

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError, as_completed
from typing import Dict, Optional

from ..core.config import Settings, settings as default_settings
from ..core.constants import ErrorConstants
from ..core.models import (
    PROVIDER_PREFERENCE,
    CompanyProfile,
    DashboardResult,
    LlmProvider,
    ProviderVisibilityResult,
)
from .dashboard import dashboard_agent
from .llm import LLMClient, LLMClientFactory
from .question_generator import QuestionGenerationOptions, question_generator_agent
from .site_metadata import fetch_meta_description
from .visibility_agent import visibility_agent_for_provider
from .visibility_scoring import VisibilityScoringOptions

logger = logging.getLogger(__name__)


def enrich_company(company: CompanyProfile, config: Settings) -> CompanyProfile:
    """Fill a missing description from the website's meta description."""
    if company.description or not company.website:
        return company

    logger.info(f"[Visibility Flow] Fetching meta description from: {company.website}")
    description = fetch_meta_description(company.website, timeout=config.metadata_timeout)
    if not description:
        return company
    logger.info(f"[Visibility Flow] Fetched description ({len(description)} chars)")
    return dataclasses.replace(company, description=description)


def run_visibility_flow(
    company: CompanyProfile,
    client: Optional[LLMClient] = None,
    settings: Optional[Settings] = None,
    question_options: Optional[QuestionGenerationOptions] = None,
    scoring_options: Optional[VisibilityScoringOptions] = None,
) -> DashboardResult:
    """Run one complete analysis.

    1. Generate realistic questions.
    2. Ask every provider concurrently and score each answer.
    3. Aggregate into insights and recommendations.

    A provider whose loop fails contributes an empty result; only a failure of
    the aggregation step propagates.
    """
    config = settings or default_settings
    client = client or LLMClientFactory.create(config)

    try:
        logger.info(f"[Visibility Flow] Starting analysis for: {company.name}")
        company = enrich_company(company, config)

        logger.info("[Visibility Flow] Step 1: Generating questions...")
        questions = question_generator_agent(client, company, question_options, settings=config)
        logger.info(f"[Visibility Flow] Generated {len(questions)} questions")

        logger.info(f"[Visibility Flow] Step 2: Checking visibility for {len(PROVIDER_PREFERENCE)} providers...")
        results: Dict[LlmProvider, ProviderVisibilityResult] = {}
        executor = ThreadPoolExecutor(max_workers=len(PROVIDER_PREFERENCE))
        try:
            future_to_provider = {
                executor.submit(
                    visibility_agent_for_provider,
                    client, provider, company, questions, scoring_options, config,
                ): provider
                for provider in PROVIDER_PREFERENCE
            }

            try:
                for future in as_completed(future_to_provider, timeout=ErrorConstants.PROVIDER_TIMEOUT):
                    provider = future_to_provider[future]
                    try:
                        result = future.result()
                        logger.info(
                            f"[Visibility Flow] {provider.value} completed "
                            f"({len(result.answers)} answers, {len(result.scores)} scores)")
                    except Exception as e:
                        logger.error(f"[Visibility Flow] Error processing {provider.value}: {e}")
                        result = ProviderVisibilityResult(provider=provider)
                    results[provider] = result
            except FutureTimeoutError:
                pending = [p.value for p in PROVIDER_PREFERENCE if p not in results]
                logger.error(
                    f"[Visibility Flow] Providers timed out after {ErrorConstants.PROVIDER_TIMEOUT}s: "
                    f"{', '.join(pending)}")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        provider_results = [
            results.get(provider, ProviderVisibilityResult(provider=provider))
            for provider in PROVIDER_PREFERENCE
        ]

        logger.info("[Visibility Flow] Step 3: Building dashboard...")
        return dashboard_agent(client, company, questions, provider_results, settings=config)
    except Exception as e:
        logger.error(f"[Visibility Flow] Fatal error in run_visibility_flow: {e}")
        raise
