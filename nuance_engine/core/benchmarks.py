"""
Style Benchmarks - pacing presets driven by comparable creative archetypes.

Users pick a style benchmark plus a pacing feel; the pair perturbs the lane's
baseline beats-per-minute range and scene minimums. Comps may suggest a
benchmark or feel but never set raw BPM directly.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from ..models import (
    BeatsPerMinute,
    BenchmarkResult,
    DialogueTargets,
    EngineProfile,
    Lane,
    PacingFeel,
    StyleBenchmark,
)

PACING_FEEL_LABELS: Dict[PacingFeel, str] = {
    PacingFeel.CALM: "Calm",
    PacingFeel.STANDARD: "Standard",
    PacingFeel.PUNCHY: "Punchy",
    PacingFeel.FRENETIC: "Frenetic",
}

STYLE_BENCHMARK_LABELS: Dict[StyleBenchmark, Dict[str, str]] = {
    StyleBenchmark.GLOSSY_COMEDY: {"name": "Glossy Comedy", "description": "Light, fast, aspirational comedy energy"},
    StyleBenchmark.ROMANTIC_BANTER: {"name": "Romantic Banter", "description": "Dialogue-driven romance with verbal sparring"},
    StyleBenchmark.KDRAMA_ROMANCE: {"name": "K-Drama Romance", "description": "Yearning, misalignment and emotional beats"},
    StyleBenchmark.WORKPLACE_POWER_GAMES: {"name": "Workplace Power Games", "description": "Leverage, status moves and subtext-heavy scenes"},
    StyleBenchmark.THRILLER_MYSTERY: {"name": "Thriller / Mystery", "description": "Controlled reveals and suspense architecture"},
    StyleBenchmark.PRESTIGE_INTIMATE: {"name": "Prestige Intimate", "description": "Restrained, character-driven, high subtext"},
    StyleBenchmark.SOAP_MELODRAMA: {"name": "Soap / Melodrama", "description": "High emotion turns, cliffhangers, fast reversals"},
    StyleBenchmark.YOUTH_ASPIRATIONAL: {"name": "Youth Aspirational", "description": "Glossy coming-of-age, micro-turns, identity"},
    StyleBenchmark.SATIRE_SYSTEMS: {"name": "Satire / Systems", "description": "Institutional antagonists, dark comedy, irony"},
    StyleBenchmark.ACTION_PULSE: {"name": "Action Pulse", "description": "Obstacle/solution cadence, physical tension"},
}


@dataclass(frozen=True)
class FeelBaseline:
    """Baseline pacing row for one lane and feel."""
    bpm_min: float
    bpm_target: float
    bpm_max: float
    quiet: int
    subtext: int
    meaning: int


LANE_BASELINES: Dict[Lane, Dict[PacingFeel, FeelBaseline]] = {
    Lane.VERTICAL_DRAMA: {
        PacingFeel.CALM: FeelBaseline(2.5, 3.0, 4.0, quiet=2, subtext=3, meaning=1),
        PacingFeel.STANDARD: FeelBaseline(2.8, 3.6, 4.8, quiet=1, subtext=2, meaning=1),
        PacingFeel.PUNCHY: FeelBaseline(3.2, 4.2, 5.5, quiet=1, subtext=2, meaning=1),
        PacingFeel.FRENETIC: FeelBaseline(4.0, 5.2, 6.2, quiet=0, subtext=1, meaning=1),
    },
    Lane.FEATURE_FILM: {
        PacingFeel.CALM: FeelBaseline(0.8, 1.4, 2.4, quiet=4, subtext=5, meaning=1),
        PacingFeel.STANDARD: FeelBaseline(1.0, 2.0, 3.2, quiet=3, subtext=4, meaning=1),
        PacingFeel.PUNCHY: FeelBaseline(1.6, 2.6, 4.0, quiet=2, subtext=3, meaning=1),
        PacingFeel.FRENETIC: FeelBaseline(2.0, 3.2, 4.8, quiet=1, subtext=2, meaning=1),
    },
    Lane.SERIES: {
        PacingFeel.CALM: FeelBaseline(1.0, 2.0, 3.0, quiet=3, subtext=4, meaning=1),
        PacingFeel.STANDARD: FeelBaseline(1.5, 2.5, 3.8, quiet=2, subtext=3, meaning=1),
        PacingFeel.PUNCHY: FeelBaseline(2.0, 3.0, 4.5, quiet=1, subtext=2, meaning=1),
        PacingFeel.FRENETIC: FeelBaseline(2.5, 3.8, 5.5, quiet=1, subtext=1, meaning=1),
    },
    Lane.DOCUMENTARY: {
        PacingFeel.CALM: FeelBaseline(0.5, 1.0, 1.8, quiet=4, subtext=3, meaning=1),
        PacingFeel.STANDARD: FeelBaseline(0.8, 1.4, 2.2, quiet=3, subtext=2, meaning=1),
        PacingFeel.PUNCHY: FeelBaseline(1.0, 1.8, 3.0, quiet=2, subtext=2, meaning=1),
        PacingFeel.FRENETIC: FeelBaseline(1.2, 2.2, 3.5, quiet=1, subtext=1, meaning=1),
    },
}


@dataclass(frozen=True)
class BenchmarkModifier:
    """
    Deltas a style benchmark applies on top of a lane baseline.

    target_delta is keyed by lane class bucket (vertical / feature / other);
    min and max move by half the target delta.
    """
    target_delta: Dict[str, float]
    quiet_delta: int = 0
    subtext_delta: int = 0
    meaning_min: Optional[int] = None
    dialogue: Optional[DialogueTargets] = None


def _deltas(vertical: float, feature: float, other: float) -> Dict[str, float]:
    return {"vertical": vertical, "feature": feature, "other": other}


BENCHMARK_MODIFIERS: Dict[StyleBenchmark, BenchmarkModifier] = {
    StyleBenchmark.GLOSSY_COMEDY: BenchmarkModifier(
        target_delta=_deltas(0.3, 0.2, 0.2),
        dialogue=DialogueTargets(subtext_ratio_target=0.40, monologue_max_lines=4),
    ),
    StyleBenchmark.ROMANTIC_BANTER: BenchmarkModifier(
        target_delta=_deltas(0.1, 0.1, 0.1),
        subtext_delta=1,
        dialogue=DialogueTargets(subtext_ratio_target=0.60, monologue_max_lines=4),
    ),
    StyleBenchmark.KDRAMA_ROMANCE: BenchmarkModifier(
        target_delta=_deltas(0, 0, 0),
        quiet_delta=1,
        subtext_delta=1,
        meaning_min=1,
        dialogue=DialogueTargets(subtext_ratio_target=0.55, monologue_max_lines=5),
    ),
    StyleBenchmark.WORKPLACE_POWER_GAMES: BenchmarkModifier(
        target_delta=_deltas(0, 0, 0),
        subtext_delta=1,
        dialogue=DialogueTargets(subtext_ratio_target=0.65, monologue_max_lines=5),
    ),
    StyleBenchmark.THRILLER_MYSTERY: BenchmarkModifier(
        target_delta=_deltas(0, 0, 0),
        meaning_min=1,
        dialogue=DialogueTargets(subtext_ratio_target=0.50, monologue_max_lines=6),
    ),
    StyleBenchmark.PRESTIGE_INTIMATE: BenchmarkModifier(
        target_delta=_deltas(-0.4, -0.4, -0.3),
        quiet_delta=1,
        subtext_delta=1,
        dialogue=DialogueTargets(subtext_ratio_target=0.70, monologue_max_lines=8),
    ),
    StyleBenchmark.SOAP_MELODRAMA: BenchmarkModifier(
        target_delta=_deltas(0.6, 0.4, 0.5),
        dialogue=DialogueTargets(subtext_ratio_target=0.35, monologue_max_lines=5),
    ),
    StyleBenchmark.YOUTH_ASPIRATIONAL: BenchmarkModifier(
        target_delta=_deltas(0, 0, 0),
        subtext_delta=1,
        dialogue=DialogueTargets(subtext_ratio_target=0.45, monologue_max_lines=4),
    ),
    StyleBenchmark.SATIRE_SYSTEMS: BenchmarkModifier(
        target_delta=_deltas(0, 0, 0),
        subtext_delta=1,
        meaning_min=2,
        dialogue=DialogueTargets(subtext_ratio_target=0.55, monologue_max_lines=6),
    ),
    StyleBenchmark.ACTION_PULSE: BenchmarkModifier(
        target_delta=_deltas(0.4, 0.4, 0.3),
        quiet_delta=-1,
        dialogue=DialogueTargets(subtext_ratio_target=0.30, monologue_max_lines=3),
    ),
}


def _delta_key(lane: Any) -> str:
    # Exact lane names only; unknown lanes fall into "other"
    name = getattr(lane, "value", lane)
    if name == Lane.VERTICAL_DRAMA.value:
        return "vertical"
    if name == Lane.FEATURE_FILM.value:
        return "feature"
    return "other"


def round_bpm(value: float) -> float:
    """Round to one decimal, halves up, on the exact binary value of the float."""
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _parse_feel(feel: Any) -> PacingFeel:
    try:
        return PacingFeel(getattr(feel, "value", feel))
    except ValueError:
        return PacingFeel.STANDARD


def _parse_benchmark(benchmark: Any) -> Optional[StyleBenchmark]:
    if benchmark is None:
        return None
    try:
        return StyleBenchmark(getattr(benchmark, "value", benchmark))
    except ValueError:
        return None


def benchmark_defaults(
    lane: Any,
    benchmark: Any = None,
    feel: Any = PacingFeel.STANDARD,
) -> BenchmarkResult:
    """
    Pacing defaults for a lane + feel + optional style benchmark.

    Unknown lanes use the feature_film table with the generic delta bucket.
    Unknown benchmarks apply no modifier and unknown feels use standard.

    Args:
        lane: Lane or lane name
        benchmark: StyleBenchmark, its name, or None
        feel: PacingFeel or its name

    Returns:
        A fresh BenchmarkResult
    """
    resolved_lane = Lane.parse(lane)
    base = LANE_BASELINES[resolved_lane][_parse_feel(feel)]

    bpm = {"min": base.bpm_min, "target": base.bpm_target, "max": base.bpm_max}
    quiet = base.quiet
    subtext = base.subtext
    meaning = base.meaning
    dialogue: Optional[DialogueTargets] = None

    modifier = BENCHMARK_MODIFIERS.get(_parse_benchmark(benchmark))
    if modifier is not None:
        delta = modifier.target_delta[_delta_key(lane)]
        bpm = {
            "min": round_bpm(bpm["min"] + delta * 0.5),
            "target": round_bpm(bpm["target"] + delta),
            "max": round_bpm(bpm["max"] + delta * 0.5),
        }
        if modifier.quiet_delta:
            quiet = max(0, quiet + modifier.quiet_delta)
        if modifier.subtext_delta:
            subtext = max(0, subtext + modifier.subtext_delta)
        if modifier.meaning_min is not None:
            meaning = max(meaning, modifier.meaning_min)
        if modifier.dialogue is not None:
            dialogue = modifier.dialogue.model_copy()

    return BenchmarkResult(
        beats_per_minute=BeatsPerMinute(**bpm),
        quiet_beats_min=quiet,
        subtext_scenes_min=subtext,
        meaning_shifts_min_per_act=meaning,
        dialogue=dialogue,
    )


def default_feel(lane: Any) -> PacingFeel:
    """Default pacing feel for a lane."""
    resolved = Lane.parse(lane)
    if resolved == Lane.VERTICAL_DRAMA:
        return PacingFeel.PUNCHY
    if resolved == Lane.DOCUMENTARY:
        return PacingFeel.CALM
    return PacingFeel.STANDARD


def default_benchmark(lane: Any) -> StyleBenchmark:
    """Default style benchmark for a lane."""
    resolved = Lane.parse(lane)
    if resolved == Lane.VERTICAL_DRAMA:
        return StyleBenchmark.WORKPLACE_POWER_GAMES
    if resolved == Lane.DOCUMENTARY:
        return StyleBenchmark.PRESTIGE_INTIMATE
    return StyleBenchmark.THRILLER_MYSTERY


def benchmark_patches(result: BenchmarkResult) -> list:
    """
    Express a BenchmarkResult as replace patches on the pacing and dialogue
    sections, so it can be layered like any other override.
    """
    patches = [
        {"op": "replace", "path": "/pacing_profile/beats_per_minute", "value": result.beats_per_minute.model_dump()},
        {"op": "replace", "path": "/pacing_profile/quiet_beats_min", "value": result.quiet_beats_min},
        {"op": "replace", "path": "/pacing_profile/subtext_scenes_min", "value": result.subtext_scenes_min},
        {"op": "replace", "path": "/pacing_profile/meaning_shifts_min_per_act", "value": result.meaning_shifts_min_per_act},
    ]
    if result.dialogue is not None:
        patches.extend([
            {"op": "replace", "path": "/dialogue_rules/subtext_ratio_target", "value": result.dialogue.subtext_ratio_target},
            {"op": "replace", "path": "/dialogue_rules/monologue_max_lines", "value": result.dialogue.monologue_max_lines},
        ])
    return patches


def apply_benchmark(profile: EngineProfile, result: BenchmarkResult) -> EngineProfile:
    """Return a copy of the profile with benchmark targets folded into its pacing section."""
    pacing = profile.pacing_profile.model_copy(update={
        "beats_per_minute": result.beats_per_minute.model_copy(),
        "quiet_beats_min": result.quiet_beats_min,
        "subtext_scenes_min": result.subtext_scenes_min,
        "meaning_shifts_min_per_act": result.meaning_shifts_min_per_act,
    })
    update: Dict[str, Any] = {"pacing_profile": pacing}
    if result.dialogue is not None:
        update["dialogue_rules"] = profile.dialogue_rules.model_copy(update={
            "subtext_ratio_target": result.dialogue.subtext_ratio_target,
            "monologue_max_lines": result.dialogue.monologue_max_lines,
        })
    return profile.model_copy(update=update, deep=True)
