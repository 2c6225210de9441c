"""
Unit tests for the gate orchestrator state machine.

Tests cover:
- Finalizing a passing attempt0 without repair
- Exactly one repair round for a failing attempt0
- Generator forms (TextGenerator, sync and async callables)
- Illegal transitions on GateRun
- NuanceGateResult invariants
"""

import pytest
from pydantic import ValidationError

from nuance_engine.core import GateOrchestrator, GateRun, GateStateError, evaluate_gate
from nuance_engine.models import GateAttempt, GateFailure, GateState, NuanceGateResult
from nuance_engine.prompts.repair import CRITICAL_REPAIR_RULES, DIVERSIFICATION_HEADER
from nuance_engine.services import TextGenerator

FULL_PATH = [
    GateState.NOT_STARTED,
    GateState.ATTEMPT0_EVALUATED,
    GateState.REPAIRED,
    GateState.ATTEMPT1_EVALUATED,
    GateState.FINALIZED,
]


class RecordingGenerator(TextGenerator):
    """Stub generator returning a fixed text and recording its calls."""

    def __init__(self, text):
        self.text = text
        self.calls = []

    async def regenerate(self, prompt_context, repair_instruction):
        self.calls.append((prompt_context, repair_instruction))
        return self.text


class TestGateOrchestratorRun:
    """Tests for GateOrchestrator.run."""

    @pytest.mark.asyncio
    async def test_passing_attempt_skips_repair(self, feature_profile, passing_text):
        """Test that a passing attempt0 finalizes without calling the generator."""
        generator = RecordingGenerator("unused")
        result = await GateOrchestrator(generator).run(passing_text, feature_profile)

        assert result.attempt1 is None
        assert result.repair_instruction is None
        assert result.final.passed is True
        assert result.final_text == passing_text
        assert result.states == [GateState.NOT_STARTED, GateState.ATTEMPT0_EVALUATED, GateState.FINALIZED]
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test_failing_attempt_repaired_once(self, feature_profile, passing_text):
        """Test that a failing attempt0 is repaired exactly once and attempt1 is authoritative."""
        generator = RecordingGenerator(passing_text)
        result = await GateOrchestrator(generator).run("", feature_profile, prompt_context="Write scene 4.")

        assert result.attempt0.passed is False
        assert result.attempt1 is not None
        assert result.final.passed is True
        assert result.final.failures == result.attempt1.failures
        assert result.final_text == passing_text
        assert result.states == FULL_PATH
        assert len(generator.calls) == 1

        prompt_context, instruction = generator.calls[0]
        assert prompt_context == "Write scene 4."
        assert instruction == result.repair_instruction
        assert instruction.endswith(CRITICAL_REPAIR_RULES)

    @pytest.mark.asyncio
    async def test_failing_repair_is_final(self, feature_profile):
        """Test that a failing attempt1 is final and no third attempt is made."""
        generator = RecordingGenerator("")
        result = await GateOrchestrator(generator).run("", feature_profile)

        assert result.final.passed is False
        assert result.final.failures == result.attempt1.failures
        assert len(generator.calls) == 1

    @pytest.mark.asyncio
    async def test_sync_callable_generator(self, feature_profile, passing_text):
        """Test that a plain function can act as the generator."""
        result = await GateOrchestrator().run("", feature_profile, generator=lambda context, instruction: passing_text)
        assert result.final.passed is True

    @pytest.mark.asyncio
    async def test_async_callable_generator(self, feature_profile, passing_text):
        """Test that a coroutine function can act as the generator."""
        async def regenerate(context, instruction):
            return passing_text

        result = await GateOrchestrator().run("", feature_profile, generator=regenerate)
        assert result.final.passed is True

    @pytest.mark.asyncio
    async def test_none_result_is_empty_text(self, feature_profile):
        """Test that a generator returning None is evaluated as empty text."""
        result = await GateOrchestrator().run("", feature_profile, generator=lambda context, instruction: None)
        assert result.final_text == ""
        assert result.attempt1.metrics.word_count == 0

    @pytest.mark.asyncio
    async def test_non_string_result_rejected(self, feature_profile):
        """Test that a non-string generator result raises TypeError."""
        with pytest.raises(TypeError):
            await GateOrchestrator().run("", feature_profile, generator=lambda context, instruction: 42)

    @pytest.mark.asyncio
    async def test_missing_generator(self, feature_profile):
        """Test that a failing attempt without a generator raises ValueError."""
        with pytest.raises(ValueError):
            await GateOrchestrator().run("", feature_profile)

    @pytest.mark.asyncio
    async def test_generator_errors_propagate(self, feature_profile):
        """Test that generator exceptions reach the caller unchanged."""
        async def broken(context, instruction):
            raise RuntimeError("provider down")

        with pytest.raises(RuntimeError, match="provider down"):
            await GateOrchestrator(broken).run("", feature_profile)

    @pytest.mark.asyncio
    async def test_hints_added_on_similarity_failure(self, feature_profile, passing_text):
        """Test that diversification hints join the instruction when similarity fails."""
        history = [evaluate_gate(passing_text, feature_profile).fingerprint] * 3
        generator = RecordingGenerator("")

        result = await GateOrchestrator(generator).run(passing_text, feature_profile, recent_fingerprints=history)

        assert result.attempt0.failures == [GateFailure.TEMPLATE_SIMILARITY]
        assert DIVERSIFICATION_HEADER in generator.calls[0][1]
        assert len(history) == 3

    @pytest.mark.asyncio
    async def test_hints_can_be_disabled(self, feature_profile, passing_text):
        """Test include_hints=False."""
        history = [evaluate_gate(passing_text, feature_profile).fingerprint]
        generator = RecordingGenerator("")

        await GateOrchestrator(generator, include_hints=False).run(
            passing_text, feature_profile, recent_fingerprints=history
        )

        assert DIVERSIFICATION_HEADER not in generator.calls[0][1]


class TestGateRun:
    """Tests for GateRun transitions."""

    def test_passing_run(self, feature_profile, passing_text):
        """Test the short path."""
        run = GateRun(profile=feature_profile)
        run.evaluate_attempt0(passing_text)

        assert run.needs_repair is False
        result = run.finalize()
        assert result.states[-1] == GateState.FINALIZED
        assert run.state == GateState.FINALIZED

    def test_repair_path(self, feature_profile, passing_text):
        """Test the full path driven step by step."""
        run = GateRun(profile=feature_profile)
        run.evaluate_attempt0("")
        assert run.needs_repair is True

        instruction = run.prepare_repair()
        assert "ADD SUBTEXT:" in instruction

        run.evaluate_attempt1(passing_text)
        result = run.finalize()
        assert result.states == FULL_PATH

    def test_attempt0_only_once(self, feature_profile):
        """Test that attempt0 cannot be evaluated twice."""
        run = GateRun(profile=feature_profile)
        run.evaluate_attempt0("")
        with pytest.raises(GateStateError):
            run.evaluate_attempt0("")

    def test_no_repair_after_pass(self, feature_profile, passing_text):
        """Test that a passing attempt cannot be repaired."""
        run = GateRun(profile=feature_profile)
        run.evaluate_attempt0(passing_text)
        with pytest.raises(GateStateError):
            run.prepare_repair()

    def test_no_attempt1_before_repair(self, feature_profile):
        """Test that attempt1 requires a repair instruction first."""
        run = GateRun(profile=feature_profile)
        run.evaluate_attempt0("")
        with pytest.raises(GateStateError):
            run.evaluate_attempt1("")

    def test_failed_attempt_must_be_repaired(self, feature_profile):
        """Test that a failing attempt0 cannot be finalized directly."""
        run = GateRun(profile=feature_profile)
        run.evaluate_attempt0("")
        with pytest.raises(GateStateError):
            run.finalize()

    def test_no_second_repair(self, feature_profile):
        """Test that the repair round cannot repeat."""
        run = GateRun(profile=feature_profile)
        run.evaluate_attempt0("")
        run.prepare_repair()
        run.evaluate_attempt1("")
        with pytest.raises(GateStateError):
            run.prepare_repair()
        run.finalize()
        with pytest.raises(GateStateError):
            run.finalize()


class TestNuanceGateResult:
    """Tests for NuanceGateResult invariants."""

    def test_final_must_track_attempt1(self):
        """Test that final cannot reflect attempt0 when attempt1 exists."""
        attempt0 = GateAttempt(failures=[GateFailure.SUBTEXT_MISSING])
        attempt1 = GateAttempt()

        with pytest.raises(ValidationError):
            NuanceGateResult(attempt0=attempt0, attempt1=attempt1, final=attempt0.verdict())

        result = NuanceGateResult(attempt0=attempt0, attempt1=attempt1, final=attempt1.verdict())
        assert result.final.passed is True

    def test_final_serializes_pass(self):
        """Test that the final verdict serializes with a 'pass' key."""
        attempt0 = GateAttempt()
        result = NuanceGateResult(attempt0=attempt0, final=attempt0.verdict())
        assert result.model_dump(by_alias=True)["final"]["pass"] is True
