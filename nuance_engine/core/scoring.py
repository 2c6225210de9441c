"""
Nuance Metrics and Scores

Lexical heuristics over generated text. Every measurement is deterministic and
approximate: counts of marker phrases, rates per 1000 words and a few
positional checks on the opening of the text.
"""

import re
from typing import Dict, List, Sequence

from ..models import NuanceMetrics, StakesType
from .classification import STAKES_RULES, collect_all, count_matches


def _pattern(body: str) -> "re.Pattern[str]":
    return re.compile(body, re.IGNORECASE)


ABSOLUTE_WORDS = _pattern(r"\b(always|never|everything|nothing|only hope|impossible|forever|completely|utterly|total(?:ly)?)\b")
TWIST_KEYWORDS = _pattern(r"\b(reveals?|turns? out|secretly|suddenly|betrayal|double.?cross\w*|shocking|plot twist|unmasked|all along)\b")
CONSPIRACY_MARKERS = _pattern(r"\b(organization|conspiracy|shadow|syndicate|cabal|secret society|hidden agenda|puppet master|pulling the strings)\b")
SHOCK_EVENTS = _pattern(r"\b(kidnap\w*|murder\w*|explosion\w*|assassin\w*|bomb\w*|massacre\w*|hostage\w*|poison(?:ed)?|gunshot\w*|stab(?:bed)?)\b")
LONG_SPEECH = re.compile(r"[\"“][^\"“”]{151,}[\"”]")
SUBTEXT_MARKERS = _pattern(r"\b(subtext|unspoken|withheld|won't say|says? instead|tactic|tell|beneath the surface|underlying)\b")
QUIET_MARKERS = _pattern(r"\b(silence|pause\w*|stillness|quiet moment|quiet beat|breath\w*|contemplat\w*|reflect\w*|stare\w*|sit with)\b")
MEANING_SHIFT_MARKERS = _pattern(r"\b(reinterpret\w*|re-?read\w*|new light|different meaning|realiz\w*|understand now|see differently|meaning shift|changes everything we thought)\b")
LEGITIMACY_MARKERS = _pattern(r"\b(legitimate|valid point|understandable|reasonable|their perspective|from their view|not wrong|has a point)\b")
COST_MARKERS = _pattern(r"\b(cost\w*|price|consequences?|sacrific\w*|trade-?offs?|lose|risk\w*|penalt\w*|repercussions?|fallout)\b")
FACTION_MARKERS = _pattern(r"\b(faction|group|alliance|coalition|clan|family|house|organization|agency|department|team|side)s?\b")
THREAD_MARKERS = _pattern(r"\b(meanwhile|subplot|thread|strand|parallel|B-story|C-story|side plot)s?\b")
CHARACTER_INTRO_MARKERS = _pattern(r"\b(introduce|introducing|we meet|enters?|arrives?|new character|first appearance)\b")

# Share of the text treated as the opening for shock-event detection
EARLY_SHOCK_FRACTION = 0.2

# Alternative phrasings for the default forbidden moves
FORBIDDEN_MOVE_ALIASES: Dict[str, List[str]] = {
    "secret_organization": ["secret society", "shadow organization", "cabal"],
    "omniscient_surveillance": ["watching everything", "sees everything", "tracked every move"],
    "sniper_assassination": ["sniper"],
    "helicopter_extraction": ["helicopter"],
    "villain_monologue": ["evil monologue"],
    "everything_is_connected": ["it's all connected", "it is all connected"],
}


def _per_thousand(count: int, word_count: int) -> float:
    return count / word_count * 1000 if word_count else 0.0


def _opening(text: str, fraction: float) -> str:
    return text[: int(len(text) * fraction)]


def compute_metrics(text: str) -> NuanceMetrics:
    """
    Measure the raw nuance signals of a text.

    Args:
        text: Generated narrative text

    Returns:
        NuanceMetrics; all zeros for empty or whitespace-only text
    """
    text = text or ""
    word_count = len(text.split())
    if word_count == 0:
        return NuanceMetrics()

    twist_count = count_matches(text, TWIST_KEYWORDS)
    intros = count_matches(text, CHARACTER_INTRO_MARKERS)

    return NuanceMetrics(
        word_count=word_count,
        absolute_words_rate=_per_thousand(count_matches(text, ABSOLUTE_WORDS), word_count),
        twist_count=twist_count,
        twist_keyword_rate=_per_thousand(twist_count, word_count),
        conspiracy_markers=count_matches(text, CONSPIRACY_MARKERS),
        shock_events_early=count_matches(_opening(text, EARLY_SHOCK_FRACTION), SHOCK_EVENTS),
        speech_length_proxy=count_matches(text, LONG_SPEECH),
        named_factions=count_matches(text, FACTION_MARKERS),
        plot_thread_count=count_matches(text, THREAD_MARKERS),
        character_introductions=intros,
        new_character_density=_per_thousand(intros, word_count),
        subtext_scene_count=count_matches(text, SUBTEXT_MARKERS),
        quiet_beats_count=count_matches(text, QUIET_MARKERS),
        meaning_shift_count=count_matches(text, MEANING_SHIFT_MARKERS),
        antagonist_legitimacy=LEGITIMACY_MARKERS.search(text) is not None,
        cost_of_action_markers=count_matches(text, COST_MARKERS),
    )


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def melodrama_score(metrics: NuanceMetrics) -> float:
    """Weighted melodrama signal in [0, 1]; higher is more melodramatic."""
    score = (
        min(1.0, metrics.absolute_words_rate / 10) * 0.2
        + min(1.0, metrics.twist_keyword_rate / 8) * 0.2
        + min(1.0, metrics.conspiracy_markers / 5) * 0.15
        + min(1.0, metrics.shock_events_early / 3) * 0.2
        + min(1.0, metrics.speech_length_proxy / 4) * 0.1
        + min(1.0, metrics.named_factions / 8) * 0.15
    )
    return _clamp(score)


def nuance_score(metrics: NuanceMetrics) -> float:
    """Weighted nuance signal in [0, 1]; higher is more restrained and layered."""
    score = (
        min(1.0, metrics.subtext_scene_count / 3) * 0.25
        + min(1.0, metrics.quiet_beats_count / 2) * 0.2
        + min(1.0, metrics.meaning_shift_count) * 0.2
        + (0.15 if metrics.antagonist_legitimacy else 0.0)
        + min(1.0, metrics.cost_of_action_markers / 2) * 0.1
        + (1 - min(1.0, (metrics.twist_keyword_rate + metrics.conspiracy_markers) / 10)) * 0.1
    )
    return _clamp(score)


def _move_phrases(move: str) -> List[str]:
    phrases = [move.replace("_", " ").strip()]
    phrases.extend(FORBIDDEN_MOVE_ALIASES.get(move, []))
    return [p for p in phrases if p]


def detect_forbidden_moves(text: str, forbidden_moves: Sequence[str]) -> List[str]:
    """Forbidden move ids whose phrase (or a known alias) occurs in the text, in profile order."""
    found: List[str] = []
    for move in forbidden_moves:
        if move in found:
            continue
        for phrase in _move_phrases(move):
            if re.search(r"\b" + re.escape(phrase) + r"\b", text or "", re.IGNORECASE):
                found.append(move)
                break
    return found


def early_stakes_categories(text: str, boundary_pct: float) -> List[StakesType]:
    """Stakes categories mentioned within the opening `boundary_pct` of the text."""
    opening = _opening(text or "", boundary_pct)
    if not opening.strip():
        return []
    return collect_all(opening, STAKES_RULES)
