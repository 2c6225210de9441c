"""
Unit tests for nuance metrics, scores and forbidden move detection.
"""

import pytest

from nuance_engine.core import compute_metrics, detect_forbidden_moves, melodrama_score, nuance_score
from nuance_engine.core.defaults import DEFAULT_FORBIDDEN_MOVES
from nuance_engine.core.scoring import early_stakes_categories
from nuance_engine.models import NuanceMetrics, StakesType

FILLER = "She files the paperwork. " * 40

MELODRAMATIC_TEXT = (
    "Always. Never. Forever. Everything. Nothing. "
    "It turns out the shadow cabal and the syndicate secretly run the conspiracy, a secret society."
)


class TestComputeMetrics:
    """Tests for compute_metrics."""

    @pytest.mark.parametrize("text", ["", "   \n\t ", None])
    def test_empty_text_is_all_zeros(self, text):
        """Test that empty or whitespace-only text yields zero metrics."""
        assert compute_metrics(text) == NuanceMetrics()

    def test_absolute_words_rate(self):
        """Test absolute words per 1000 words."""
        metrics = compute_metrics("She always lies and never apologizes")
        assert metrics.word_count == 6
        assert metrics.absolute_words_rate == pytest.approx(2 / 6 * 1000)

    def test_twist_keywords(self):
        """Test twist keyword counting."""
        metrics = compute_metrics("It turns out he secretly reveals the plan")
        assert metrics.twist_count == 3
        assert metrics.twist_keyword_rate == pytest.approx(3 / 8 * 1000)

    def test_shock_events_only_counted_early(self):
        """Test that shock events count only within the opening fifth of the text."""
        early = compute_metrics("Murder, kidnapping and a bomb. " + FILLER)
        late = compute_metrics(FILLER + "Then a murder.")

        assert early.shock_events_early == 3
        assert late.shock_events_early == 0

    def test_long_speech(self):
        """Test that quoted spans over 150 characters count as speeches."""
        speech = '"' + "word " * 40 + '"'
        assert compute_metrics(f"He said {speech} and left.").speech_length_proxy == 1
        assert compute_metrics('He said "no" and left.').speech_length_proxy == 0

    def test_nuance_signals(self, passing_text):
        """Test subtext, quiet beat, meaning shift, legitimacy and cost counts."""
        metrics = compute_metrics(passing_text)

        assert metrics.subtext_scene_count == 5
        assert metrics.quiet_beats_count == 4
        assert metrics.meaning_shift_count == 2
        assert metrics.antagonist_legitimacy is True
        assert metrics.cost_of_action_markers >= 2

    def test_complexity_signals(self):
        """Test thread, faction and character introduction counts."""
        metrics = compute_metrics(
            "Meanwhile the subplot grows. We meet Dana. The family and the agency take sides."
        )
        assert metrics.plot_thread_count == 2
        assert metrics.character_introductions == 1
        assert metrics.named_factions == 3


class TestScores:
    """Tests for melodrama and nuance scores."""

    def test_scores_bounded(self, passing_text):
        """Test that both scores stay within [0, 1]."""
        for text in ["", passing_text, MELODRAMATIC_TEXT, MELODRAMATIC_TEXT * 20]:
            metrics = compute_metrics(text)
            assert 0.0 <= melodrama_score(metrics) <= 1.0
            assert 0.0 <= nuance_score(metrics) <= 1.0

    def test_melodramatic_text_scores_higher(self, passing_text):
        """Test that melodrama separates the two registers."""
        melodramatic = compute_metrics(MELODRAMATIC_TEXT)
        restrained = compute_metrics(passing_text)

        assert melodrama_score(melodramatic) > 0.5
        assert melodrama_score(restrained) == 0.0
        assert nuance_score(restrained) > nuance_score(melodramatic)

    def test_saturated_metrics(self):
        """Test the score ceiling with saturated metrics."""
        metrics = NuanceMetrics(
            absolute_words_rate=100,
            twist_keyword_rate=100,
            conspiracy_markers=50,
            shock_events_early=10,
            speech_length_proxy=10,
            named_factions=50,
        )
        assert melodrama_score(metrics) == pytest.approx(1.0)


class TestForbiddenMoves:
    """Tests for detect_forbidden_moves."""

    def test_profile_order(self):
        """Test that found moves follow profile order, not text order."""
        text = "Then a sniper fires. A secret organization watches."
        assert detect_forbidden_moves(text, DEFAULT_FORBIDDEN_MOVES) == [
            "secret_organization",
            "sniper_assassination",
        ]

    def test_case_and_underscores(self):
        """Test that ids match their spaced phrase case-insensitively."""
        assert detect_forbidden_moves("A VILLAIN MONOLOGUE follows.", DEFAULT_FORBIDDEN_MOVES) == ["villain_monologue"]
        assert detect_forbidden_moves("They rely on time travel.", ["time_travel"]) == ["time_travel"]

    def test_word_boundaries(self):
        """Test that phrases must match whole words."""
        assert detect_forbidden_moves("A helicopterless town.", DEFAULT_FORBIDDEN_MOVES) == []

    def test_clean_text(self, passing_text):
        """Test that restrained text triggers nothing."""
        assert detect_forbidden_moves(passing_text, DEFAULT_FORBIDDEN_MOVES) == []


class TestEarlyStakes:
    """Tests for early_stakes_categories."""

    def test_early_global_stakes(self):
        """Test that stakes in the opening fraction are reported."""
        text = "The fate of the world hangs on it. " + FILLER
        assert early_stakes_categories(text, 0.2) == [StakesType.GLOBAL]

    def test_late_stakes_ignored(self):
        """Test that stakes after the boundary are not reported."""
        text = FILLER + "The fate of the world hangs on it."
        assert early_stakes_categories(text, 0.2) == []

    def test_zero_boundary(self):
        """Test that a zero boundary has an empty opening."""
        assert early_stakes_categories("The world ends.", 0.0) == []
