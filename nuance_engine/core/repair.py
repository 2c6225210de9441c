"""
Repair Instruction Builder

Turns gate failures into the instruction text for one bounded regeneration.
Output is a pure function of (failures, profile, found moves, hints): blocks
follow GateFailure declaration order regardless of how failures were listed.
"""

from typing import Callable, Dict, List, Optional, Sequence

from ..models import DiversificationHints, EngineProfile, GateFailure, LaneClass
from ..prompts.repair import (
    COMPLEXITY_DIRECTIVES,
    CRITICAL_REPAIR_RULES,
    DIVERSIFICATION_HEADER,
    FEATURE_MELODRAMA_PRIORITIES,
    FEATURE_SIMILARITY_DIRECTIVES,
    FORBIDDEN_MOVES_HEADER,
    GENERIC_MELODRAMA_PRIORITIES,
    GENERIC_SIMILARITY_DIRECTIVES,
    MEANING_SHIFT_DIRECTIVES,
    MELODRAMA_DIRECTIVES,
    QUIET_BEATS_DIRECTIVES,
    STAKES_DIRECTIVES,
    SUBTEXT_DIRECTIVES,
    TWIST_DIRECTIVES,
    VERTICAL_MELODRAMA_PRIORITIES,
    VERTICAL_SIMILARITY_DIRECTIVES,
)
from .gate import complexity_limits


def humanize_move(move: str) -> str:
    return move.replace("_", " ")


def _melodrama(profile: EngineProfile) -> str:
    lane_class = profile.lane_class
    if lane_class == LaneClass.VERTICAL:
        priorities = VERTICAL_MELODRAMA_PRIORITIES
    elif lane_class == LaneClass.FEATURE:
        priorities = FEATURE_MELODRAMA_PRIORITIES
    else:
        priorities = GENERIC_MELODRAMA_PRIORITIES
    return f"{MELODRAMA_DIRECTIVES}\n{priorities}"


def _complexity(profile: EngineProfile) -> str:
    limits = complexity_limits(profile)
    return COMPLEXITY_DIRECTIVES.format(
        threads_max=limits.threads_max,
        core_chars_max=limits.core_chars_max,
        factions_max=limits.factions_max,
    )


def _similarity(profile: EngineProfile) -> str:
    lane_class = profile.lane_class
    if lane_class == LaneClass.VERTICAL:
        return VERTICAL_SIMILARITY_DIRECTIVES
    if lane_class == LaneClass.FEATURE:
        return FEATURE_SIMILARITY_DIRECTIVES
    return GENERIC_SIMILARITY_DIRECTIVES


def _stakes(profile: EngineProfile) -> str:
    ladder = profile.stakes_ladder
    allowed = sorted({s.value for s in ladder.early_allowed} | {"personal"})
    return STAKES_DIRECTIVES.format(
        early_allowed="/".join(allowed),
        boundary_pct=round(ladder.no_global_before_pct * 100),
    )


def _twists(profile: EngineProfile) -> str:
    return TWIST_DIRECTIVES.format(
        twist_cap=profile.budgets.twist_cap,
        big_reveal_cap=profile.budgets.big_reveal_cap,
    )


def _subtext(profile: EngineProfile) -> str:
    return SUBTEXT_DIRECTIVES.format(subtext_min=profile.pacing_profile.subtext_scenes_min)


def _quiet(profile: EngineProfile) -> str:
    return QUIET_BEATS_DIRECTIVES.format(quiet_min=profile.pacing_profile.quiet_beats_min)


def _meaning(profile: EngineProfile) -> str:
    return MEANING_SHIFT_DIRECTIVES.format(meaning_min=profile.pacing_profile.meaning_shifts_min_per_act)


# FORBIDDEN_MOVE_PRESENT is rendered from the detected moves, not from a fixed block
DIRECTIVE_BUILDERS: Dict[GateFailure, Callable[[EngineProfile], str]] = {
    GateFailure.MELODRAMA: _melodrama,
    GateFailure.OVERCOMPLEXITY: _complexity,
    GateFailure.TEMPLATE_SIMILARITY: _similarity,
    GateFailure.STAKES_TOO_BIG_TOO_EARLY: _stakes,
    GateFailure.TWIST_OVERUSE: _twists,
    GateFailure.SUBTEXT_MISSING: _subtext,
    GateFailure.QUIET_BEATS_MISSING: _quiet,
    GateFailure.MEANING_SHIFT_MISSING: _meaning,
}


def _hint_lines(hints: DiversificationHints) -> List[str]:
    groups = [
        ("story engines", hints.avoid_engines),
        ("causal grammars", hints.avoid_grammars),
        ("stakes types", hints.avoid_stakes_types),
        ("conflict modes", hints.avoid_conflict_modes),
        ("inciting incidents", hints.avoid_inciting_categories),
    ]
    return [
        f"- Avoid {label}: {', '.join(humanize_move(v.value) for v in values)}."
        for label, values in groups
        if values
    ]


def build_repair_instruction(
    failures: Sequence[GateFailure],
    profile: EngineProfile,
    found_forbidden_moves: Optional[Sequence[str]] = None,
    hints: Optional[DiversificationHints] = None,
) -> str:
    """
    Build the repair instruction for one regeneration attempt.

    Args:
        failures: Gate failure codes, in any order
        profile: Resolved EngineProfile (lane class and caps fill the directives)
        found_forbidden_moves: Forbidden move ids detected in the failed text
        hints: Diversification hints, rendered when TEMPLATE_SIMILARITY failed

    Returns:
        Plain-text instruction; always ends with the critical repair rules
    """
    present = {GateFailure(f) for f in failures}
    blocks: List[str] = []

    for code in GateFailure:
        if code not in present:
            continue
        builder = DIRECTIVE_BUILDERS.get(code)
        if builder is not None:
            blocks.append(builder(profile))
        if code == GateFailure.TEMPLATE_SIMILARITY and hints is not None and not hints.is_empty:
            blocks.append("\n".join([DIVERSIFICATION_HEADER] + _hint_lines(hints)))

    moves = list(dict.fromkeys(found_forbidden_moves or []))
    if not moves and GateFailure.FORBIDDEN_MOVE_PRESENT in present:
        moves = list(profile.forbidden_moves)
    if moves:
        blocks.append("\n".join([FORBIDDEN_MOVES_HEADER] + [f"- No {humanize_move(m)}." for m in moves]))

    blocks.append(CRITICAL_REPAIR_RULES)
    return "\n\n".join(blocks)
