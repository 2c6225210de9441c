"""
Quality Gate

Evaluates one generation attempt against the resolved profile. Each check is
independent; failures are reported in GateFailure declaration order and the
gate itself never raises on any text.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence

from ..models import (
    EngineProfile,
    GateAttempt,
    GateFailure,
    NuanceMetrics,
    RulesetFingerprint,
    StakesType,
)
from .fingerprint import extract_fingerprint, similarity_risk
from .scoring import (
    compute_metrics,
    detect_forbidden_moves,
    early_stakes_categories,
    melodrama_score,
    nuance_score,
)

logger = logging.getLogger("nuance_engine.gate")

# Early shock events tolerated before stakes are considered inflated
EARLY_SHOCK_LIMIT = 2


def _stakes_too_early(metrics: NuanceMetrics, profile: EngineProfile) -> bool:
    allowed = set(profile.stakes_ladder.early_allowed) | {StakesType.PERSONAL}
    if any(stakes not in allowed for stakes in metrics.early_stakes):
        return True
    return metrics.shock_events_early > EARLY_SHOCK_LIMIT


class ComplexityLimits(NamedTuple):
    threads_max: int
    core_chars_max: int
    factions_max: int


def complexity_limits(profile: EngineProfile) -> ComplexityLimits:
    """Effective complexity caps: the stricter of the story budget and the gate threshold."""
    budgets = profile.budgets
    thresholds = profile.gate_thresholds
    return ComplexityLimits(
        threads_max=min(budgets.plot_thread_cap, thresholds.complexity_threads_max),
        core_chars_max=min(budgets.core_character_cap, thresholds.complexity_core_chars_max),
        factions_max=min(budgets.faction_cap, thresholds.complexity_factions_max),
    )


def check_failures(metrics: NuanceMetrics, melodrama: float, profile: EngineProfile) -> List[GateFailure]:
    """
    Apply every threshold check to computed metrics.

    Returns:
        Failure codes in canonical order
    """
    thresholds = profile.gate_thresholds
    budgets = profile.budgets
    pacing = profile.pacing_profile
    limits = complexity_limits(profile)

    failed = {
        GateFailure.MELODRAMA: melodrama > thresholds.melodrama_max,
        GateFailure.OVERCOMPLEXITY: (
            metrics.plot_thread_count > limits.threads_max
            or metrics.named_factions > limits.factions_max
            or metrics.character_introductions > limits.core_chars_max
        ),
        GateFailure.TEMPLATE_SIMILARITY: metrics.similarity_risk > thresholds.similarity_max,
        GateFailure.STAKES_TOO_BIG_TOO_EARLY: _stakes_too_early(metrics, profile),
        GateFailure.TWIST_OVERUSE: metrics.twist_count > budgets.twist_cap + budgets.big_reveal_cap,
        GateFailure.SUBTEXT_MISSING: metrics.subtext_scene_count < pacing.subtext_scenes_min,
        GateFailure.QUIET_BEATS_MISSING: metrics.quiet_beats_count < pacing.quiet_beats_min,
        GateFailure.MEANING_SHIFT_MISSING: metrics.meaning_shift_count < pacing.meaning_shifts_min_per_act,
        GateFailure.FORBIDDEN_MOVE_PRESENT: bool(metrics.found_forbidden_moves),
    }
    return [code for code in GateFailure if failed[code]]


def evaluate_gate(
    text: str,
    profile: EngineProfile,
    recent_fingerprints: Optional[Sequence[RulesetFingerprint]] = None,
) -> GateAttempt:
    """
    Evaluate a generated text against the profile.

    Args:
        text: Generated narrative text
        profile: Resolved EngineProfile
        recent_fingerprints: Read-only history snapshot; never modified

    Returns:
        GateAttempt with failures, scores, metrics and the attempt's fingerprint
    """
    recent = list(recent_fingerprints or [])

    fingerprint = extract_fingerprint(text, profile)
    metrics = compute_metrics(text)
    metrics.similarity_risk = similarity_risk(fingerprint, recent)
    metrics.early_stakes = early_stakes_categories(text, profile.stakes_ladder.no_global_before_pct)
    metrics.found_forbidden_moves = detect_forbidden_moves(text, profile.forbidden_moves)

    melodrama = melodrama_score(metrics)
    failures = check_failures(metrics, melodrama, profile)

    logger.debug(
        f"[evaluate_gate] lane={profile.lane.value} failures={[f.value for f in failures]} "
        f"melodrama={melodrama:.2f} similarity={metrics.similarity_risk:.2f}"
    )

    return GateAttempt(
        failures=failures,
        melodrama_score=melodrama,
        nuance_score=nuance_score(metrics),
        metrics=metrics,
        fingerprint=fingerprint,
    )
