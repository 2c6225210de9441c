"""
Comp-Influenced Profiles

Derives an engine profile from the lane defaults plus a set of comparable
titles ("comps"), flags where the result drifts from the lane's defaults, and
renders a short human-readable summary of a profile.
"""

import logging
import math
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence, Union

from ..models import CompInfluencer, EngineProfile, ProfileConflict, StakesType
from .defaults import default_engine_profile

logger = logging.getLogger("nuance_engine.derive")

InfluencerLike = Union[CompInfluencer, Dict[str, Any]]

# Safe ceilings for comp-driven adjustments
MAX_DERIVED_TWIST_CAP = 3
MAX_DERIVED_SUBTEXT_RATIO = 0.8


def _half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def derive_engine_profile(lane: Any, influencers: Optional[Sequence[InfluencerLike]] = None) -> EngineProfile:
    """
    Build the lane default profile nudged by comparable titles.

    Each influencer contributes its weight to every influence dimension it
    lists. Dimension shares (dimension weight / total weight) then adjust:

    - pacing: BPM target rises by up to 1, never above max
    - twist_budget: twist_cap +1 (at most 3) when the share exceeds 0.6
    - stakes_ladder: social stakes allowed early when the share exceeds 0.5
    - dialogue_style: subtext ratio target rises by up to 0.1 (at most 0.8)

    Influencer avoid_tags are appended to forbidden_moves.

    Args:
        lane: Production lane
        influencers: Comp influencers (models or mappings)

    Returns:
        Derived EngineProfile
    """
    profile = default_engine_profile(lane)
    comps = [CompInfluencer.model_validate(i) if not isinstance(i, CompInfluencer) else i for i in influencers or []]
    if not comps:
        return profile

    document = profile.to_document()
    document["comps"]["influencers"] = [comp.model_dump(mode="json") for comp in comps]

    for comp in comps:
        for tag in comp.avoid_tags:
            if tag not in document["forbidden_moves"]:
                document["forbidden_moves"].append(tag)

    dimension_weight: Dict[str, float] = defaultdict(float)
    total_weight = 0.0
    for comp in comps:
        weight = comp.weight or 1.0
        for dimension in comp.dimensions:
            dimension_weight[dimension] += weight
        total_weight += weight

    if total_weight > 0:
        bpm = document["pacing_profile"]["beats_per_minute"]
        budgets = document["budgets"]
        ladder = document["stakes_ladder"]
        dialogue = document["dialogue_rules"]

        if dimension_weight["pacing"]:
            share = min(1.0, dimension_weight["pacing"] / total_weight)
            bpm["target"] = min(bpm["max"], _half_up(bpm["target"] + share))
        if dimension_weight["twist_budget"] / total_weight > 0.6:
            budgets["twist_cap"] = min(MAX_DERIVED_TWIST_CAP, budgets["twist_cap"] + 1)
        if dimension_weight["stakes_ladder"] / total_weight > 0.5:
            if StakesType.SOCIAL.value not in ladder["early_allowed"]:
                ladder["early_allowed"].append(StakesType.SOCIAL.value)
        if dimension_weight["dialogue_style"]:
            share = min(1.0, dimension_weight["dialogue_style"] / total_weight)
            dialogue["subtext_ratio_target"] = min(
                MAX_DERIVED_SUBTEXT_RATIO, dialogue["subtext_ratio_target"] + share * 0.1
            )

    logger.info(f"[derive_engine_profile] Derived {profile.lane.value} profile from {len(comps)} comp(s)")
    return EngineProfile.model_validate(document)


def detect_conflicts(profile: EngineProfile) -> List[ProfileConflict]:
    """Compare a profile against its lane defaults."""
    defaults = default_engine_profile(profile.lane)
    conflicts: List[ProfileConflict] = []

    twist_cap = profile.budgets.twist_cap
    default_twist_cap = defaults.budgets.twist_cap
    if twist_cap > default_twist_cap + 1:
        conflicts.append(ProfileConflict(
            id="twist_vs_restraint",
            severity="warn",
            dimension="twist_budget",
            message=f"Twist cap ({twist_cap}) exceeds lane default ({default_twist_cap}).",
            inferred_value=str(twist_cap),
            expected_value=str(default_twist_cap),
            suggested_actions=["honor_comps", "honor_overrides"],
        ))

    boundary = profile.stakes_ladder.no_global_before_pct
    default_boundary = defaults.stakes_ladder.no_global_before_pct
    if boundary < default_boundary - 0.05:
        conflicts.append(ProfileConflict(
            id="early_global_stakes",
            severity="warn",
            dimension="stakes_ladder",
            message=f"Global stakes earlier ({round(boundary * 100)}%) than default ({round(default_boundary * 100)}%).",
            inferred_value=str(boundary),
            expected_value=str(default_boundary),
            suggested_actions=["honor_overrides", "blend"],
        ))

    for move in defaults.forbidden_moves:
        if move not in profile.forbidden_moves:
            conflicts.append(ProfileConflict(
                id=f"missing_forbidden_{move}",
                severity="hard",
                dimension="forbidden_moves",
                message=f'Default forbidden move "{move}" not in derived profile.',
                inferred_value="allowed",
                expected_value="forbidden",
                suggested_actions=["honor_overrides"],
            ))

    return conflicts


def generate_rules_summary(profile: EngineProfile) -> str:
    """Short multi-line summary of a profile for display."""
    engine = profile.engine
    budgets = profile.budgets
    pacing = profile.pacing_profile
    ladder = profile.stakes_ladder
    lines = [
        f"Lane: {profile.lane.value}",
        f"Engine: {engine.story_engine.value} / {engine.causal_grammar.value} / {engine.conflict_mode.value}",
        f"Drama: {budgets.drama_budget}, Twists: {budgets.twist_cap}, Reveals: {budgets.big_reveal_cap}",
        f"Chars: max {budgets.core_character_cap}, Threads: max {budgets.plot_thread_cap}",
        f"Quiet beats: min {pacing.quiet_beats_min}, Subtext: min {pacing.subtext_scenes_min}",
        f"Stakes: {'/'.join(s.value for s in ladder.early_allowed)} early; "
        f"no global before {round(ladder.no_global_before_pct * 100)}%",
    ]
    if profile.comps.influencers:
        lines.append(f"Comps: {', '.join(i.title for i in profile.comps.influencers)}")
    return "\n".join(lines)
