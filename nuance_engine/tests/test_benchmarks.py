"""
Unit tests for style benchmark defaults.

Tests cover:
- Baseline lookup per lane and feel
- Benchmark BPM deltas, scene minimum deltas and meaning floors
- Fallbacks for unknown lanes, feels and benchmarks
- Fresh results per call (no shared state)
- Folding results into a profile
"""

import itertools

import pytest

from nuance_engine.core import apply_benchmark, benchmark_defaults, default_benchmark, default_feel
from nuance_engine.core.benchmarks import BENCHMARK_MODIFIERS, LANE_BASELINES, benchmark_patches, round_bpm
from nuance_engine.models import Lane, PacingFeel, StyleBenchmark


class TestBaselines:
    """Tests for unmodified lane baselines."""

    def test_feature_standard_baseline(self):
        """Test the feature_film standard row without a benchmark."""
        result = benchmark_defaults(Lane.FEATURE_FILM)

        assert result.beats_per_minute.min == pytest.approx(1.0)
        assert result.beats_per_minute.target == pytest.approx(2.0)
        assert result.beats_per_minute.max == pytest.approx(3.2)
        assert result.quiet_beats_min == 3
        assert result.subtext_scenes_min == 4
        assert result.meaning_shifts_min_per_act == 1
        assert result.dialogue is None

    def test_table_is_complete(self):
        """Test that every lane has a row for every feel."""
        for lane in Lane:
            assert set(LANE_BASELINES[lane]) == set(PacingFeel)
        assert set(BENCHMARK_MODIFIERS) == set(StyleBenchmark)

    def test_accepts_names(self):
        """Test that string names resolve like enum members."""
        assert benchmark_defaults("series", "satire_systems", "calm") == benchmark_defaults(
            Lane.SERIES, StyleBenchmark.SATIRE_SYSTEMS, PacingFeel.CALM
        )


class TestBenchmarkModifiers:
    """Tests for benchmark deltas."""

    def test_vertical_punchy_soap(self):
        """Test soap_melodrama on vertical punchy: target +0.6, edges +0.3."""
        result = benchmark_defaults(Lane.VERTICAL_DRAMA, StyleBenchmark.SOAP_MELODRAMA, PacingFeel.PUNCHY)

        assert result.beats_per_minute.target == pytest.approx(4.8)
        assert result.beats_per_minute.min == pytest.approx(3.5)
        assert result.beats_per_minute.max == pytest.approx(5.8)
        assert result.dialogue.subtext_ratio_target == pytest.approx(0.35)
        assert result.dialogue.monologue_max_lines == 5

    def test_feature_delta_bucket(self):
        """Test that feature lanes use the feature delta."""
        result = benchmark_defaults(Lane.FEATURE_FILM, StyleBenchmark.SOAP_MELODRAMA, PacingFeel.STANDARD)
        assert result.beats_per_minute.target == pytest.approx(2.4)
        assert result.beats_per_minute.min == pytest.approx(1.2)

    def test_other_delta_bucket(self):
        """Test that series and documentary use the 'other' delta."""
        result = benchmark_defaults(Lane.SERIES, StyleBenchmark.SOAP_MELODRAMA, PacingFeel.STANDARD)
        assert result.beats_per_minute.target == pytest.approx(3.0)

    def test_half_deltas_round_up(self):
        """Test that exact halves round up: series calm + soap gives 1.3 / 2.5 / 3.3."""
        bpm = benchmark_defaults(Lane.SERIES, StyleBenchmark.SOAP_MELODRAMA, PacingFeel.CALM).beats_per_minute

        assert bpm.min == pytest.approx(1.3)
        assert bpm.target == pytest.approx(2.5)
        assert bpm.max == pytest.approx(3.3)

    @pytest.mark.parametrize("value, expected", [(1.25, 1.3), (3.25, 3.3), (0.15, 0.1), (2.0499999, 2.0), (4.8, 4.8)])
    def test_round_bpm(self, value, expected):
        """Test rounding on the exact float value, halves up."""
        assert round_bpm(value) == expected

    def test_results_rounded_to_one_decimal(self):
        """Test that BPM values carry one decimal place."""
        for lane, feel, benchmark in itertools.product(Lane, PacingFeel, StyleBenchmark):
            bpm = benchmark_defaults(lane, benchmark, feel).beats_per_minute
            for value in (bpm.min, bpm.target, bpm.max):
                assert value == round(value, 1)

    def test_meaning_floor_raises_only(self):
        """Test that the meaning-shift floor never lowers the baseline."""
        assert benchmark_defaults(Lane.FEATURE_FILM, StyleBenchmark.SATIRE_SYSTEMS).meaning_shifts_min_per_act == 2
        assert benchmark_defaults(Lane.FEATURE_FILM, StyleBenchmark.KDRAMA_ROMANCE).meaning_shifts_min_per_act == 1

    def test_scene_deltas(self):
        """Test quiet and subtext minimum deltas."""
        prestige = benchmark_defaults(Lane.FEATURE_FILM, StyleBenchmark.PRESTIGE_INTIMATE)
        assert prestige.quiet_beats_min == 4
        assert prestige.subtext_scenes_min == 5

        action = benchmark_defaults(Lane.FEATURE_FILM, StyleBenchmark.ACTION_PULSE)
        assert action.quiet_beats_min == 2

    def test_scene_minimums_never_negative(self):
        """Test that a negative delta stops at zero."""
        result = benchmark_defaults(Lane.VERTICAL_DRAMA, StyleBenchmark.ACTION_PULSE, PacingFeel.FRENETIC)
        assert result.quiet_beats_min == 0

    def test_bpm_ordering_for_every_triple(self):
        """Test min <= target <= max for all lane, feel and benchmark combinations."""
        benchmarks = list(StyleBenchmark) + [None]
        for lane, feel, benchmark in itertools.product(Lane, PacingFeel, benchmarks):
            bpm = benchmark_defaults(lane, benchmark, feel).beats_per_minute
            assert bpm.min <= bpm.target <= bpm.max, (lane, feel, benchmark)


class TestFallbacks:
    """Tests for unknown configuration values."""

    def test_unknown_lane_uses_feature_film(self):
        """Test that an unknown lane falls back to the feature_film table."""
        assert benchmark_defaults("space_western", None, "punchy") == benchmark_defaults(
            Lane.FEATURE_FILM, None, PacingFeel.PUNCHY
        )

    def test_unknown_lane_uses_other_delta(self):
        """Test that an unknown lane takes the generic delta on the feature_film table."""
        bpm = benchmark_defaults("space_western", "soap_melodrama", "punchy").beats_per_minute

        assert bpm.target == pytest.approx(3.1)
        assert bpm.min == pytest.approx(1.9)
        assert bpm.max == pytest.approx(4.3)

    def test_unknown_benchmark_applies_no_modifier(self):
        """Test that an unknown benchmark returns the baseline."""
        assert benchmark_defaults(Lane.SERIES, "opera_buffa") == benchmark_defaults(Lane.SERIES)

    def test_unknown_feel_uses_standard(self):
        """Test that an unknown feel uses the standard row."""
        assert benchmark_defaults(Lane.SERIES, None, "languid") == benchmark_defaults(Lane.SERIES, None, PacingFeel.STANDARD)


class TestIsolation:
    """Tests that results never share state."""

    def test_mutating_result_does_not_leak(self):
        """Test that each call clones the baseline and modifier."""
        first = benchmark_defaults(Lane.VERTICAL_DRAMA, StyleBenchmark.SOAP_MELODRAMA, PacingFeel.PUNCHY)
        first.beats_per_minute.target = 99.0
        first.dialogue.monologue_max_lines = 99

        second = benchmark_defaults(Lane.VERTICAL_DRAMA, StyleBenchmark.SOAP_MELODRAMA, PacingFeel.PUNCHY)
        assert second.beats_per_minute.target == pytest.approx(4.8)
        assert second.dialogue.monologue_max_lines == 5
        assert BENCHMARK_MODIFIERS[StyleBenchmark.SOAP_MELODRAMA].dialogue.monologue_max_lines == 5

    def test_deterministic(self):
        """Test that identical inputs produce identical outputs."""
        args = (Lane.DOCUMENTARY, StyleBenchmark.PRESTIGE_INTIMATE, PacingFeel.CALM)
        assert benchmark_defaults(*args) == benchmark_defaults(*args)


class TestLaneDefaults:
    """Tests for default feel and benchmark per lane."""

    def test_default_feel(self):
        """Test default feel per lane."""
        assert default_feel(Lane.VERTICAL_DRAMA) == PacingFeel.PUNCHY
        assert default_feel(Lane.DOCUMENTARY) == PacingFeel.CALM
        assert default_feel(Lane.FEATURE_FILM) == PacingFeel.STANDARD
        assert default_feel("unknown") == PacingFeel.STANDARD

    def test_default_benchmark(self):
        """Test default benchmark per lane."""
        assert default_benchmark(Lane.VERTICAL_DRAMA) == StyleBenchmark.WORKPLACE_POWER_GAMES
        assert default_benchmark(Lane.DOCUMENTARY) == StyleBenchmark.PRESTIGE_INTIMATE
        assert default_benchmark(Lane.SERIES) == StyleBenchmark.THRILLER_MYSTERY


class TestApplyBenchmark:
    """Tests for folding a BenchmarkResult into a profile."""

    def test_apply_benchmark(self, vertical_profile):
        """Test that pacing and dialogue targets are replaced on a copy."""
        result = benchmark_defaults(Lane.VERTICAL_DRAMA, StyleBenchmark.SOAP_MELODRAMA, PacingFeel.PUNCHY)
        profile = apply_benchmark(vertical_profile, result)

        assert profile.pacing_profile.beats_per_minute.target == pytest.approx(4.8)
        assert profile.dialogue_rules.subtext_ratio_target == pytest.approx(0.35)
        assert vertical_profile.pacing_profile.beats_per_minute.target == pytest.approx(3.0)
        assert vertical_profile.dialogue_rules.subtext_ratio_target == pytest.approx(0.55)

    def test_apply_benchmark_without_dialogue(self, feature_profile):
        """Test that dialogue rules are kept when the result carries none."""
        profile = apply_benchmark(feature_profile, benchmark_defaults(Lane.FEATURE_FILM))
        assert profile.dialogue_rules == feature_profile.dialogue_rules
        assert profile.pacing_profile.quiet_beats_min == 3

    def test_benchmark_patches(self):
        """Test the patch form of a result."""
        with_dialogue = benchmark_patches(benchmark_defaults(Lane.SERIES, StyleBenchmark.GLOSSY_COMEDY))
        without_dialogue = benchmark_patches(benchmark_defaults(Lane.SERIES))

        assert len(with_dialogue) == 6
        assert len(without_dialogue) == 4
        assert all(patch["op"] == "replace" for patch in with_dialogue)
