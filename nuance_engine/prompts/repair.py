"""
Repair Directive Prompts - Nuance Gate Repair Phase

Fixed directive blocks fed to the text generator after a failed gate attempt.
Blocks with placeholders are filled from the resolved profile.
"""

# =============================================================================
# Melodrama
# =============================================================================

MELODRAMA_DIRECTIVES = """REDUCE MELODRAMA:
- Convert screaming confessions to withheld corrections.
- Replace physical threats with resource withdrawal or social leverage.
- Replace villain monologues with bureaucratic language.
- Cut absolute language by half."""

VERTICAL_MELODRAMA_PRIORITIES = """VERTICAL DRAMA REPAIR PRIORITIES:
- Keep the hook energy, but make every escalation a status move: leverage, exposure, favours called in.
- Replace violence and conspiracies with social friction inside one workplace or family.
- End episodes on a shifted power balance, not a shock event."""

FEATURE_MELODRAMA_PRIORITIES = """FEATURE FILM REPAIR PRIORITIES:
- Slow the escalation curve; let quiet beats carry the pressure between events.
- Raise subtext density: characters pursue wants obliquely and rarely name them.
- Let the climax be a choice with a cost, not a reveal."""

GENERIC_MELODRAMA_PRIORITIES = """REPAIR PRIORITIES:
- Ground each escalation in a concrete constraint (money, time, institution).
- Prefer consequence over spectacle."""

# =============================================================================
# Structure
# =============================================================================

COMPLEXITY_DIRECTIVES = """REDUCE COMPLEXITY:
- Collapse plot threads to at most {threads_max}.
- Limit core characters to {core_chars_max}.
- Remove non-essential factions; keep at most {factions_max}."""

VERTICAL_SIMILARITY_DIRECTIVES = """BREAK THE TEMPLATE:
- Change the conflict mode and the inciting incident; these are what repeat across recent episodes.
- Keep the lane's pacing but move the pressure onto a different relationship."""

FEATURE_SIMILARITY_DIRECTIVES = """BREAK THE TEMPLATE:
- Change how cause and effect propagate (causal grammar) and the shape of the story engine.
- Keep the premise; change the mechanism."""

GENERIC_SIMILARITY_DIRECTIVES = """BREAK THE TEMPLATE:
- Vary the stakes, the antagonist and the ending away from recent generations."""

STAKES_DIRECTIVES = """REFRAME EARLY STAKES:
- Keep stakes {early_allowed} through the first {boundary_pct}% of the story.
- Remove global or life-threatening stakes from early acts.
- Move shock events later or replace them with procedural consequences."""

TWIST_DIRECTIVES = """REDUCE TWISTS:
- Keep at most {twist_cap} twist(s) and {big_reveal_cap} big reveal(s).
- Replace removed twists with character insight."""

# =============================================================================
# Required Elements
# =============================================================================

SUBTEXT_DIRECTIVES = """ADD SUBTEXT:
- Include at least {subtext_min} subtext scenes with wants / won't say / says instead / tactic / tell."""

QUIET_BEATS_DIRECTIVES = """ADD QUIET BEATS:
- Include at least {quiet_min} quiet beats with tension carried through behavior, not dialogue."""

MEANING_SHIFT_DIRECTIVES = """ADD MEANING SHIFTS:
- Include at least {meaning_min} moment(s) per act that reinterpret existing information without new facts."""

FORBIDDEN_MOVES_HEADER = "AVOID TROPES:"

DIVERSIFICATION_HEADER = "DIVERSIFY AWAY FROM RECENT GENERATIONS:"

CRITICAL_REPAIR_RULES = """CRITICAL REPAIR RULES:
- Do NOT add new plot elements, characters or factions.
- Only remove, replace, or reframe what is already there.
- Opposition must stay legitimate: a values collision, a systemic constraint or a reasonable disagreement."""
