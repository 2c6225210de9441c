"""
Lane Default Profiles

Base rulebooks per production lane. Every resolution starts from one of these
unless a saved engine profile is supplied.
"""

from typing import Any, Dict

from ..models import EngineProfile, Lane

DEFAULT_FORBIDDEN_MOVES = [
    "secret_organization",
    "omniscient_surveillance",
    "sniper_assassination",
    "helicopter_extraction",
    "villain_monologue",
    "everything_is_connected",
]

DEFAULT_SIGNATURE_DEVICES = [
    "meaning_shift_instead_of_twist",
    "leverage_over_violence",
    "polite_threats",
    "status_choreography",
]


def _base_document(lane: Lane) -> Dict[str, Any]:
    return {
        "version": "1.0",
        "lane": lane.value,
        "comps": {"influencers": [], "tags": []},
        "engine": {
            "story_engine": "pressure_cooker",
            "causal_grammar": "accumulation",
            "conflict_mode": "moral_trap",
        },
        "pacing_profile": {
            "beats_per_minute": {"min": 2, "target": 3, "max": 5},
            "cliffhanger_rate": {"target": 0.5, "max": 0.7},
            "quiet_beats_min": 3,
            "subtext_scenes_min": 4,
            "meaning_shifts_min_per_act": 1,
        },
        "stakes_ladder": {
            "early_allowed": ["personal"],
            "no_global_before_pct": 0.20,
            "late_allowed": ["systemic"],
            "notes": "Personal stakes only through the first 20%",
        },
        "budgets": {
            "drama_budget": 2,
            "twist_cap": 1,
            "big_reveal_cap": 1,
            "plot_thread_cap": 3,
            "core_character_cap": 5,
            "faction_cap": 1,
            "coincidence_cap": 1,
        },
        "dialogue_rules": {
            "subtext_ratio_target": 0.55,
            "monologue_max_lines": 6,
            "no_speeches": True,
            "absolute_words_penalty": True,
        },
        "texture_rules": {
            "money_time_institution_required": True,
            "cost_of_action_required": True,
            "admin_violence_preferred": True,
        },
        "antagonism_model": {
            "primary": "system",
            "legitimacy_required": True,
            "no_omnipotence": True,
        },
        "forbidden_moves": list(DEFAULT_FORBIDDEN_MOVES),
        "signature_devices": list(DEFAULT_SIGNATURE_DEVICES),
        "gate_thresholds": {
            "melodrama_max": 0.50,
            "similarity_max": 0.60,
            "complexity_threads_max": 3,
            "complexity_factions_max": 1,
            "complexity_core_chars_max": 5,
        },
    }


# Per-lane deltas, merged one level deep into the base document
LANE_VARIATIONS: Dict[Lane, Dict[str, Dict[str, Any]]] = {
    Lane.FEATURE_FILM: {},
    Lane.VERTICAL_DRAMA: {
        "engine": {"conflict_mode": "status_reputation"},
        "pacing_profile": {
            "cliffhanger_rate": {"target": 0.9, "max": 1.0},
            "quiet_beats_min": 1,
            "subtext_scenes_min": 2,
        },
        "stakes_ladder": {
            "early_allowed": ["personal", "social"],
            "no_global_before_pct": 0.25,
            "late_allowed": ["systemic"],
            "notes": "Personal/social stakes early; no global stakes through the first 25%",
        },
        "budgets": {
            "drama_budget": 3,
            "twist_cap": 2,
            "big_reveal_cap": 1,
            "core_character_cap": 6,
            "faction_cap": 2,
        },
        "gate_thresholds": {
            "melodrama_max": 0.62,
            "similarity_max": 0.70,
            "complexity_threads_max": 3,
            "complexity_factions_max": 2,
            "complexity_core_chars_max": 6,
        },
    },
    Lane.SERIES: {
        "engine": {"conflict_mode": "family_obligation"},
        "pacing_profile": {"quiet_beats_min": 2, "subtext_scenes_min": 3},
        "budgets": {"drama_budget": 2, "twist_cap": 1},
        "gate_thresholds": {
            "melodrama_max": 0.35,
            "similarity_max": 0.65,
            "complexity_threads_max": 3,
            "complexity_factions_max": 2,
            "complexity_core_chars_max": 5,
        },
    },
    Lane.DOCUMENTARY: {
        "engine": {
            "story_engine": "slow_burn_investigation",
            "causal_grammar": "accumulation",
            "conflict_mode": "legal_procedural",
        },
        "pacing_profile": {"quiet_beats_min": 3, "subtext_scenes_min": 2},
        "budgets": {
            "drama_budget": 1,
            "twist_cap": 0,
            "big_reveal_cap": 0,
            "faction_cap": 1,
        },
        "gate_thresholds": {
            "melodrama_max": 0.15,
            "similarity_max": 0.70,
            "complexity_threads_max": 3,
            "complexity_factions_max": 1,
            "complexity_core_chars_max": 5,
        },
    },
}


def default_profile_document(lane: Any) -> Dict[str, Any]:
    """
    Build the JSON document for a lane's default profile.

    Args:
        lane: Lane or lane name; unknown lanes resolve to feature_film

    Returns:
        A fresh document the caller may mutate
    """
    resolved = Lane.parse(lane)
    document = _base_document(resolved)
    for section, delta in LANE_VARIATIONS[resolved].items():
        document[section] = {**document[section], **delta}
    return document


def default_engine_profile(lane: Any) -> EngineProfile:
    """Get the lane default EngineProfile."""
    return EngineProfile.model_validate(default_profile_document(lane))
