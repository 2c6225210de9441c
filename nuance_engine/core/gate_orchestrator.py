"""
Gate Orchestrator

Runs the bounded generate -> judge -> repair loop for one generated text:

    NOT_STARTED -> ATTEMPT0_EVALUATED -> [REPAIRED -> ATTEMPT1_EVALUATED] -> FINALIZED

A passing attempt0 finalizes immediately. A failing attempt0 gets exactly one
repair round; attempt1 is authoritative whether or not it passes.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from ..models import (
    EngineProfile,
    GateAttempt,
    GateFailure,
    GateState,
    NuanceGateResult,
    RulesetFingerprint,
)
from ..services.text_generator import TextGenerator
from .fingerprint import diversification_hints
from .gate import evaluate_gate
from .repair import build_repair_instruction

logger = logging.getLogger("nuance_engine.gate_orchestrator")

GeneratorCallable = Callable[[str, str], Union[str, Awaitable[str]]]
GeneratorLike = Union[TextGenerator, GeneratorCallable]

ALLOWED_TRANSITIONS: Dict[GateState, Set[GateState]] = {
    GateState.NOT_STARTED: {GateState.ATTEMPT0_EVALUATED},
    GateState.ATTEMPT0_EVALUATED: {GateState.REPAIRED, GateState.FINALIZED},
    GateState.REPAIRED: {GateState.ATTEMPT1_EVALUATED},
    GateState.ATTEMPT1_EVALUATED: {GateState.FINALIZED},
    GateState.FINALIZED: set(),
}


class GateStateError(RuntimeError):
    """Raised on an illegal gate state transition."""
    pass


@dataclass
class GateRun:
    """
    State of one gate run. Transition logic is synchronous; only the
    regeneration between REPAIRED and ATTEMPT1_EVALUATED is external.
    """
    profile: EngineProfile
    recent_fingerprints: Tuple[RulesetFingerprint, ...] = ()
    include_hints: bool = True
    state: GateState = GateState.NOT_STARTED
    states: List[GateState] = field(default_factory=lambda: [GateState.NOT_STARTED])
    attempt0: Optional[GateAttempt] = None
    attempt1: Optional[GateAttempt] = None
    repair_instruction: Optional[str] = None
    text: str = ""

    def _advance(self, new_state: GateState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise GateStateError(f"Illegal gate transition {self.state.value} -> {new_state.value}")
        logger.info(f"[GateRun._advance] {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.states.append(new_state)

    @property
    def needs_repair(self) -> bool:
        return (
            self.state == GateState.ATTEMPT0_EVALUATED
            and self.attempt0 is not None
            and not self.attempt0.passed
        )

    def evaluate_attempt0(self, text: str) -> GateAttempt:
        if self.state != GateState.NOT_STARTED:
            raise GateStateError(f"attempt0 cannot be evaluated in state {self.state.value}")
        self.text = text or ""
        self.attempt0 = evaluate_gate(self.text, self.profile, self.recent_fingerprints)
        self._advance(GateState.ATTEMPT0_EVALUATED)
        logger.info(
            f"[GateRun.evaluate_attempt0] pass={self.attempt0.passed}, "
            f"failures={[f.value for f in self.attempt0.failures]}"
        )
        return self.attempt0

    def prepare_repair(self) -> str:
        """Build the repair instruction from attempt0's failures."""
        if not self.needs_repair:
            raise GateStateError(f"repair is not allowed in state {self.state.value}")
        hints = None
        if self.include_hints and GateFailure.TEMPLATE_SIMILARITY in self.attempt0.failures:
            hints = diversification_hints(self.recent_fingerprints, self.profile.lane)
        self.repair_instruction = build_repair_instruction(
            self.attempt0.failures,
            self.profile,
            found_forbidden_moves=self.attempt0.metrics.found_forbidden_moves,
            hints=hints,
        )
        self._advance(GateState.REPAIRED)
        return self.repair_instruction

    def evaluate_attempt1(self, text: str) -> GateAttempt:
        if self.state != GateState.REPAIRED:
            raise GateStateError(f"attempt1 cannot be evaluated in state {self.state.value}")
        self.text = text or ""
        self.attempt1 = evaluate_gate(self.text, self.profile, self.recent_fingerprints)
        self._advance(GateState.ATTEMPT1_EVALUATED)
        logger.info(
            f"[GateRun.evaluate_attempt1] pass={self.attempt1.passed}, "
            f"failures={[f.value for f in self.attempt1.failures]}"
        )
        return self.attempt1

    def finalize(self) -> NuanceGateResult:
        if self.state == GateState.ATTEMPT0_EVALUATED and self.needs_repair:
            raise GateStateError("a failed attempt0 must be repaired before finalizing")
        self._advance(GateState.FINALIZED)
        authoritative = self.attempt1 if self.attempt1 is not None else self.attempt0
        return NuanceGateResult(
            attempt0=self.attempt0,
            attempt1=self.attempt1,
            final=authoritative.verdict(),
            repair_instruction=self.repair_instruction,
            final_text=self.text,
            states=list(self.states),
        )


class GateOrchestrator:
    """Drives GateRun through one bounded repair using an injected text generator."""

    def __init__(self, generator: Optional[GeneratorLike] = None, include_hints: bool = True):
        self.generator = generator
        self.include_hints = include_hints

    async def _regenerate(self, generator: GeneratorLike, prompt_context: str, repair_instruction: str) -> str:
        if isinstance(generator, TextGenerator):
            result = await generator.regenerate(prompt_context, repair_instruction)
        else:
            result = generator(prompt_context, repair_instruction)
            if inspect.isawaitable(result):
                result = await result
        if result is None:
            return ""
        if not isinstance(result, str):
            raise TypeError(f"Text generator returned {type(result).__name__}, expected str")
        return result

    async def run(
        self,
        text: str,
        profile: EngineProfile,
        recent_fingerprints: Optional[Sequence[RulesetFingerprint]] = None,
        generator: Optional[GeneratorLike] = None,
        prompt_context: str = "",
    ) -> NuanceGateResult:
        """
        Evaluate a text and, if it fails, repair it once.

        Args:
            text: attempt0 text
            profile: Resolved EngineProfile
            recent_fingerprints: Read-only history snapshot
            generator: Overrides the orchestrator's generator for this run
            prompt_context: Original prompt context passed back to the generator

        Returns:
            NuanceGateResult; attempt1 is present iff attempt0 failed

        Raises:
            ValueError: attempt0 failed and no generator is available
        """
        run = GateRun(
            profile=profile,
            recent_fingerprints=tuple(recent_fingerprints or ()),
            include_hints=self.include_hints,
        )
        attempt0 = run.evaluate_attempt0(text)

        if attempt0.passed:
            return run.finalize()

        generator = generator or self.generator
        if generator is None:
            raise ValueError("A text generator is required to repair a failed attempt")

        instruction = run.prepare_repair()
        logger.info(f"[GateOrchestrator.run] Regenerating with {len(attempt0.failures)} failure directive(s)")
        regenerated = await self._regenerate(generator, prompt_context, instruction)
        run.evaluate_attempt1(regenerated)

        result = run.finalize()
        logger.info(
            f"[GateOrchestrator.run] Finalized after repair: pass={result.final.passed}, "
            f"nuance={result.final.nuance_score:.2f}"
        )
        return result
