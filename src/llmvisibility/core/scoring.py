"""Visibility scoring: breakdown normalization, weighting and heuristics."""

import json
import logging
import math
from dataclasses import asdict, fields
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from .constants import ScoringConstants
from .models import CompanyProfile, ScoringBreakdown, ScoringWeights

logger = logging.getLogger(__name__)

DEFAULT_SCORING_WEIGHTS = ScoringWeights(
    mention_presence=0.20,
    mention_context=0.25,
    mention_position=0.15,
    description_detail=0.20,
    answer_relevance=0.10,
    service_match=0.10,
)

FACTORS = tuple(f.name for f in fields(ScoringWeights))

# camelCase keys requested from the scoring model
_CAMEL_KEYS = {
    "mention_presence": "mentionPresence",
    "mention_count": "mentionCount",
    "mention_context": "mentionContext",
    "mention_position": "mentionPosition",
    "description_detail": "descriptionDetail",
    "answer_relevance": "answerRelevance",
    "service_match": "serviceMatch",
    "rationale": "rationale",
}


def _clamp(value: Any, lo: float = 0.0, hi: float = 1.0) -> float:
    """Coerce to float and clamp to [lo, hi]; anything non-finite becomes 0."""
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(num):
        return 0.0
    return max(lo, min(hi, num))


def _finite_count(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return value


def _lookup(raw: Mapping[str, Any], name: str) -> Any:
    camel = _CAMEL_KEYS[name]
    if camel in raw:
        return raw[camel]
    return raw.get(name)


def normalize_breakdown(raw: Union[ScoringBreakdown, Mapping[str, Any]]) -> ScoringBreakdown:
    """Clamp and coerce a raw scoring record into a ``ScoringBreakdown``."""
    if isinstance(raw, ScoringBreakdown):
        raw = asdict(raw)
    if not isinstance(raw, Mapping):
        raise TypeError(f"Scoring breakdown must be a mapping, got {type(raw).__name__}")

    rationale = _lookup(raw, "rationale")
    return ScoringBreakdown(
        mention_presence=_clamp(_lookup(raw, "mention_presence")),
        mention_count=_finite_count(_lookup(raw, "mention_count")),
        mention_context=_clamp(_lookup(raw, "mention_context")),
        mention_position=_clamp(_lookup(raw, "mention_position")),
        description_detail=_clamp(_lookup(raw, "description_detail")),
        answer_relevance=_clamp(_lookup(raw, "answer_relevance")),
        service_match=_clamp(_lookup(raw, "service_match")),
        rationale=rationale if isinstance(rationale, str) else "",
    )


def normalize_weights(weights: ScoringWeights) -> ScoringWeights:
    """Scale weights to sum to 1.0; a zero sum falls back to the defaults."""
    values = {}
    for name in FACTORS:
        w = getattr(weights, name)
        try:
            w = float(w)
        except (TypeError, ValueError):
            w = 0.0
        values[name] = w if math.isfinite(w) and w > 0 else 0.0

    total = sum(values.values())
    if total == 0 or not math.isfinite(total):
        return normalize_weights(DEFAULT_SCORING_WEIGHTS)
    return ScoringWeights(**{name: w / total for name, w in values.items()})


def calculate_visibility_score(
    breakdown: ScoringBreakdown,
    weights: Optional[ScoringWeights] = None,
) -> float:
    """Combine a breakdown into a single score in [0, 1].

    If the company is not mentioned at all the score is capped at 0.2, so a
    model rating relevance or service match highly cannot make an absent
    company look visible.
    """
    w = normalize_weights(weights or DEFAULT_SCORING_WEIGHTS)

    try:
        base = sum(float(getattr(breakdown, name)) * getattr(w, name) for name in FACTORS)
        presence = float(breakdown.mention_presence)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(base) or not math.isfinite(presence):
        return 0.0

    final = base if presence > 0 else min(base, ScoringConstants.NOT_MENTIONED_CAP)
    return _clamp(final)


def heuristic_score(company: CompanyProfile, answer: str) -> Tuple[float, str]:
    """Substring-based fallback score and rationale for one answer."""
    lower_answer = (answer or "").lower()
    company_mentioned = company.name.lower() in lower_answer
    service_matched = any(service.lower() in lower_answer for service in company.services)

    if company_mentioned and service_matched:
        score = ScoringConstants.HEURISTIC_COMPANY_AND_SERVICE
    elif company_mentioned:
        score = ScoringConstants.HEURISTIC_COMPANY_ONLY
    elif service_matched:
        score = ScoringConstants.HEURISTIC_SERVICE_ONLY
    else:
        score = ScoringConstants.HEURISTIC_NONE

    rationale = (
        f"Company {'was' if company_mentioned else 'was not'} mentioned; "
        f"service {'was' if service_matched else 'was not'} recognized."
    )
    return score, rationale


def parse_weights(value: Union[str, Mapping[str, Any], None]) -> Optional[ScoringWeights]:
    """Parse a weight override from JSON text or a mapping.

    Missing factors take their default weight. Returns None (and logs) when the
    override is malformed.
    """
    if value is None or value == "":
        return None

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Failed to parse scoring weights JSON, using defaults")
            return None

    if not isinstance(value, Mapping):
        logger.warning(f"Scoring weights must be an object, got {type(value).__name__}")
        return None

    defaults = asdict(DEFAULT_SCORING_WEIGHTS)
    parsed: Dict[str, float] = {}
    for name in FACTORS:
        raw = _lookup(value, name)
        if raw is None:
            parsed[name] = defaults[name]
            continue
        if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw) or raw < 0:
            logger.warning(f"Invalid scoring weight for {name}: {raw!r}, using defaults")
            return None
        parsed[name] = float(raw)

    return ScoringWeights(**parsed)


def load_weights_file(path: Optional[str]) -> Optional[ScoringWeights]:
    """Load scoring weights from a YAML file (a top-level ``weights`` key is optional)."""
    if not path:
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load scoring weights file {path}: {e}. Using defaults.")
        return None

    if isinstance(data, Mapping) and isinstance(data.get("weights"), Mapping):
        data = data["weights"]
    return parse_weights(data)
