"""
Nuance Constraint Prompt - Generation Phase

Constraint block appended to the generator's system prompt so the first
attempt is written against the same rulebook the gate will enforce.
"""

from typing import List

from ..models import CausalGrammar, EngineProfile, StoryEngine

# =============================================================================
# Engine and Grammar Descriptions
# =============================================================================

ENGINE_DESCRIPTIONS = {
    StoryEngine.PRESSURE_COOKER: "Characters trapped in escalating constraints with diminishing options.",
    StoryEngine.TWO_HANDER: "Two central characters in an evolving power dynamic.",
    StoryEngine.SLOW_BURN_INVESTIGATION: "Gradual revelation through methodical inquiry and observation.",
    StoryEngine.SOCIAL_REALISM: "Grounded in everyday reality, institutional friction, economic pressure.",
    StoryEngine.MORAL_TRAP: "Protagonist faces an impossible choice with legitimate arguments on all sides.",
    StoryEngine.CHARACTER_SPIRAL: "Internal deterioration or transformation driven by a core flaw.",
    StoryEngine.RASHOMON: "Multiple perspectives revealing contradictory truths.",
    StoryEngine.ANTI_PLOT: "Deliberately subverts narrative expectations; meaning emerges from pattern, not arc.",
}

GRAMMAR_DESCRIPTIONS = {
    CausalGrammar.ACCUMULATION: "Small pressures compound until a threshold breaks.",
    CausalGrammar.EROSION: "Something valued is gradually worn away.",
    CausalGrammar.EXCHANGE: "Every gain requires a specific loss.",
    CausalGrammar.MIRROR: "Characters in parallel situations make different choices.",
    CausalGrammar.CONSTRAINT: "External systems limit what characters can do.",
    CausalGrammar.MISALIGNMENT: "Characters want compatible things but can't coordinate.",
    CausalGrammar.CONTAGION: "One person's choice cascades through a network.",
    CausalGrammar.REVELATION_WITHOUT_FACTS: "Understanding shifts without new information.",
}

MELODRAMA_TRANSLATOR = """### Melodrama Translator
Convert any of these patterns to their adult equivalents:
- Screaming confession -> withheld correction / loaded silence with consequence
- Physical threat -> resource withdrawal / contract clause / social leverage
- Villain monologue -> polite email / policy / bureaucratic language
- Sudden violence -> reputational, financial, or procedural consequence"""


def build_nuance_prompt_block(profile: EngineProfile) -> str:
    """
    Render the nuance constraints of a profile for the generator prompt.

    Args:
        profile: Resolved EngineProfile

    Returns:
        Markdown constraint block
    """
    engine = profile.engine
    budgets = profile.budgets
    pacing = profile.pacing_profile
    ladder = profile.stakes_ladder

    early = "/".join(s.value for s in ladder.early_allowed) or "personal"
    lines: List[str] = [
        "## NUANCE CONSTRAINTS (MANDATORY)",
        "",
        f"### Story Engine: {engine.story_engine.value}",
        ENGINE_DESCRIPTIONS.get(engine.story_engine, ""),
        "",
        f"### Causal Grammar: {engine.causal_grammar.value}",
        GRAMMAR_DESCRIPTIONS.get(engine.causal_grammar, ""),
        "",
        f"### Conflict Mode: {engine.conflict_mode.value}",
        "",
        "### Drama Budget",
        f"- Maximum {budgets.drama_budget} major escalations allowed.",
        f"- Maximum {budgets.twist_cap} twist(s) and {budgets.big_reveal_cap} big reveal(s).",
        f"- Maximum {budgets.core_character_cap} core characters.",
        f"- Maximum {budgets.plot_thread_cap} major plot threads.",
        f"- Stakes must remain {early} through the first {round(ladder.no_global_before_pct * 100)}% of the story.",
        "",
        "### Required Elements",
        f"- At least {pacing.subtext_scenes_min} SUBTEXT SCENES: for each, specify what each character wants, "
        "what they won't say, what they say instead, their tactic, and the tell.",
        f"- At least {pacing.quiet_beats_min} QUIET BEATS WITH TEETH: tension present but unexpressed, "
        "character revealed through behavior.",
        f"- At least {pacing.meaning_shifts_min_per_act} MEANING SHIFT(S) per act: reinterpretation of existing "
        "information, no new facts needed.",
    ]
    if profile.antagonism_model.legitimacy_required:
        lines.append(
            "- Opposition must be LEGITIMATE: values collision, systemic constraint, "
            "or reasonable disagreement, not an evil mastermind."
        )

    lines.extend(["", MELODRAMA_TRANSLATOR])

    if profile.forbidden_moves:
        lines.extend(["", "### Forbidden Tropes"])
        lines.extend(f"- Do NOT use: {move.replace('_', ' ')}" for move in profile.forbidden_moves)

    return "\n".join(lines)
