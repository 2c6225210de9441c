"""
Structural Fingerprinting and Diversity Risk

Fingerprints summarize the structural template of a generated text. Comparing
a fresh fingerprint against recent history yields a 0-1 risk that the engine
is converging on the same template.
"""

from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..models import (
    AntagonistType,
    DiversificationHints,
    EndingType,
    EngineProfile,
    IncitingIncidentCategory,
    LaneClass,
    RulesetFingerprint,
    StakesType,
    TwistCountBucket,
)
from .classification import (
    ANTAGONIST_RULES,
    ENDING_RULES,
    INCITING_RULES,
    SETTING_RULES,
    SETTING_TAG_CAP,
    STAKES_RULES,
    TWIST_PHRASES,
    classify_first,
    collect_all,
    count_matches,
)


def twist_bucket(count: int) -> TwistCountBucket:
    if count <= 0:
        return TwistCountBucket.NONE
    if count == 1:
        return TwistCountBucket.ONE
    return TwistCountBucket.MANY


def extract_fingerprint(text: str, profile: EngineProfile) -> RulesetFingerprint:
    """
    Compute the structural fingerprint of a generated text.

    Lane and engine triple come from the profile; every other field is
    classified from the text, defaulting to its neutral category.

    Args:
        text: Generated narrative text (may be empty)
        profile: Resolved EngineProfile

    Returns:
        RulesetFingerprint
    """
    text = text or ""
    return RulesetFingerprint(
        lane=profile.lane,
        story_engine=profile.engine.story_engine,
        causal_grammar=profile.engine.causal_grammar,
        conflict_mode=profile.engine.conflict_mode,
        stakes_type=classify_first(text, STAKES_RULES, StakesType.PERSONAL),
        twist_count_bucket=twist_bucket(count_matches(text, TWIST_PHRASES)),
        antagonist_type=classify_first(text, ANTAGONIST_RULES, AntagonistType.PERSON),
        ending_type=classify_first(text, ENDING_RULES, EndingType.AMBIGUOUS),
        inciting_incident_category=classify_first(text, INCITING_RULES, IncitingIncidentCategory.DISCOVERY),
        setting_texture_tags=collect_all(text, SETTING_RULES, cap=SETTING_TAG_CAP),
    )


# ============================================================================
# Diversity Risk
# ============================================================================

# (field, weight) per lane class; setting tags never participate
VERTICAL_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    ("conflict_mode", 3),
    ("inciting_incident_category", 3),
    ("story_engine", 1),
    ("causal_grammar", 1),
    ("stakes_type", 1),
    ("antagonist_type", 1),
    ("ending_type", 1),
)

FEATURE_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    ("story_engine", 3),
    ("causal_grammar", 3),
    ("conflict_mode", 1),
    ("inciting_incident_category", 1),
    ("stakes_type", 1),
    ("antagonist_type", 1),
    ("ending_type", 1),
)

DEFAULT_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    ("story_engine", 1),
    ("causal_grammar", 1),
    ("conflict_mode", 1),
    ("stakes_type", 1),
    ("twist_count_bucket", 1),
    ("antagonist_type", 1),
    ("ending_type", 1),
    ("inciting_incident_category", 1),
)


def field_weights(lane: Any) -> Tuple[Tuple[str, int], ...]:
    lane_class = LaneClass.from_lane(lane)
    if lane_class == LaneClass.VERTICAL:
        return VERTICAL_WEIGHTS
    if lane_class == LaneClass.FEATURE:
        return FEATURE_WEIGHTS
    return DEFAULT_WEIGHTS


def similarity_risk(
    current: RulesetFingerprint,
    recent: Sequence[RulesetFingerprint],
    lane: Optional[Any] = None,
) -> float:
    """
    Similarity risk of `current` against recent history, in [0, 1].

    For each prior fingerprint the matched share of total field weight is
    computed; the result is the mean share over the whole history, so the
    order of `recent` does not matter.

    Args:
        current: Fingerprint of the attempt under evaluation
        recent: Recent fingerprints (read-only snapshot)
        lane: Weighting lane; defaults to current.lane

    Returns:
        Risk in [0, 1]; 0 for empty history
    """
    if not recent:
        return 0.0

    weights = field_weights(lane if lane is not None else current.lane)
    total_weight = sum(weight for _, weight in weights)

    overlap = 0.0
    for previous in recent:
        matched = sum(
            weight for name, weight in weights
            if getattr(current, name) == getattr(previous, name)
        )
        overlap += matched / total_weight

    return max(0.0, min(1.0, overlap / len(recent)))


# Share of history at which a category is flagged as overused
HINT_THRESHOLD = 0.4
VERTICAL_HINT_THRESHOLD = 0.3


def _overused(values: List[Any], threshold: float) -> List[Any]:
    counts: Dict[Any, int] = Counter(values)
    return [value for value, count in counts.items() if count >= threshold]


def diversification_hints(
    recent: Sequence[RulesetFingerprint],
    lane: Optional[Any] = None,
) -> DiversificationHints:
    """
    Categories that appear in too large a share of recent fingerprints.

    Vertical lanes use a lower threshold for conflict mode and inciting
    incident, the two dimensions they diversify on.
    """
    if not recent:
        return DiversificationHints()

    threshold = len(recent) * HINT_THRESHOLD
    conflict_threshold = threshold
    if lane is not None and LaneClass.from_lane(lane) == LaneClass.VERTICAL:
        conflict_threshold = len(recent) * VERTICAL_HINT_THRESHOLD

    return DiversificationHints(
        avoid_engines=_overused([fp.story_engine for fp in recent], threshold),
        avoid_grammars=_overused([fp.causal_grammar for fp in recent], threshold),
        avoid_stakes_types=_overused([fp.stakes_type for fp in recent], threshold),
        avoid_conflict_modes=_overused([fp.conflict_mode for fp in recent], conflict_threshold),
        avoid_inciting_categories=_overused([fp.inciting_incident_category for fp in recent], conflict_threshold),
    )
