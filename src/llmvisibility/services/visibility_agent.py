"""Per-provider visibility agent."""

import logging
from typing import List, Optional

from ..core.config import Settings
from ..core.constants import PromptConstants
from ..core.models import (
    CompanyProfile,
    GeneratedQuestion,
    LlmProvider,
    LlmRawAnswer,
    ProviderVisibilityResult,
    VisibilityScore,
)
from ..core.scoring import heuristic_score
from .visibility_scoring import VisibilityScoringOptions, score_answer_visibility

logger = logging.getLogger(__name__)


def build_answer_prompt(company: CompanyProfile, question: GeneratedQuestion) -> str:
    return (
        f"You are an assistant. The user asked: \"{question.text}\".\n"
        "\n"
        "Answer naturally.\n"
        "IMPORTANT:\n"
        "- Mention real company names that fit the request.\n"
        f"- If the company \"{company.name}\" is relevant, mention it explicitly in your answer.\n"
    )


def related_service(company: CompanyProfile, question: GeneratedQuestion) -> str:
    """First service named in the question, else the company's first service."""
    text = question.text.lower()
    for service in company.services:
        if service.lower() in text:
            return service
    return company.services[0]


def visibility_agent_for_provider(
    client,
    provider: LlmProvider,
    company: CompanyProfile,
    questions: List[GeneratedQuestion],
    options: Optional[VisibilityScoringOptions] = None,
    settings: Optional[Settings] = None,
) -> ProviderVisibilityResult:
    """Ask one provider every question in order and score each answer.

    Errors from the provider call propagate; the pipeline turns them into an
    empty result for this provider.
    """
    answers: List[LlmRawAnswer] = []
    scores: List[VisibilityScore] = []

    for question in questions:
        answer = client.generate_answer(provider, build_answer_prompt(company, question))
        logger.debug(f"[{provider.value}] Question: {question.text}")
        logger.debug(f"[{provider.value}] Answer: {answer[:PromptConstants.LOG_PREVIEW_LENGTH]}")

        answers.append(LlmRawAnswer(question_id=question.id, question=question.text, answer=answer))

        h_score, h_rationale = heuristic_score(company, answer)
        result = score_answer_visibility(
            client,
            provider,
            company,
            question,
            answer,
            h_score,
            h_rationale,
            options=options,
            settings=settings,
        )

        scores.append(VisibilityScore(
            provider=provider,
            service=related_service(company, question),
            score=result.score,
            rationale=result.rationale,
        ))

    return ProviderVisibilityResult(provider=provider, answers=answers, scores=scores)
