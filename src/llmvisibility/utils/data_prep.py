"""Data preparation for export and company profile loading."""

import json
from typing import Any, Dict, List

import yaml

from ..core.constants import FileConstants
from ..core.models import CompanyProfile, DashboardResult


def company_from_dict(data: Dict[str, Any]) -> CompanyProfile:
    """Build a profile from an API-style payload; ``name`` and ``services`` are required."""
    if not isinstance(data, dict):
        raise ValueError("Company payload must be an object")
    if isinstance(data.get("company"), dict):
        data = data["company"]

    name = data.get("name")
    services = data.get("services")
    if not name or not isinstance(services, list) or not services:
        raise ValueError("Invalid company payload. 'name' and 'services' are required.")

    locales = data.get("targetLocales", data.get("target_locales"))
    return CompanyProfile(
        name=str(name),
        description=data.get("description") or "",
        services=[str(s) for s in services],
        website=data.get("website") or None,
        target_locales=[str(l) for l in locales] if locales else None,
    )


def load_company_profile(path: str) -> CompanyProfile:
    """Load a company profile from a YAML or JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return company_from_dict(data)


def prepare_export(result: DashboardResult) -> Dict[str, Any]:
    """Convert a dashboard result into the JSON structure returned to callers."""
    company = result.company
    company_data: Dict[str, Any] = {
        "name": company.name,
        "description": company.description,
        "services": list(company.services),
    }
    if company.website:
        company_data["website"] = company.website
    if company.target_locales:
        company_data["targetLocales"] = list(company.target_locales)

    provider_results: List[Dict[str, Any]] = []
    for provider_result in result.provider_results:
        provider_results.append({
            "provider": provider_result.provider.value,
            "answers": [
                {"questionId": a.question_id, "question": a.question, "answer": a.answer}
                for a in provider_result.answers
            ],
            "scores": [
                {
                    "provider": s.provider.value,
                    "service": s.service,
                    "score": s.score,
                    "rationale": s.rationale,
                }
                for s in provider_result.scores
            ],
        })

    return {
        "company": company_data,
        "questions": [
            {"id": q.id, "text": q.text, "language": q.language, "intent": q.intent}
            for q in result.questions
        ],
        "providerResults": provider_results,
        "insights": [
            {"service": i.service, "avgScore": i.avg_score, "comments": list(i.comments)}
            for i in result.insights
        ],
        "recommendations": [
            {"title": r.title, "description": r.description, "suggestedPrompts": list(r.suggested_prompts)}
            for r in result.recommendations
        ],
        "metadata": {
            "export_timestamp": None,  # Will be set by caller
            "version": FileConstants.EXPORT_VERSION,
        },
    }


def export_to_json(data: Dict[str, Any], filename: str) -> None:
    """Export data to JSON file."""
    import datetime

    # Add timestamp
    data.setdefault("metadata", {})["export_timestamp"] = datetime.datetime.now().isoformat()

    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
