"""
Nuance Engine Core Module
Ruleset resolution, fingerprinting, the quality gate and its repair loop.
"""

from .benchmarks import apply_benchmark, benchmark_defaults, default_benchmark, default_feel
from .classification import ClassificationRule, classify_first, collect_all
from .defaults import default_engine_profile, default_profile_document
from .derive import derive_engine_profile, detect_conflicts, generate_rules_summary
from .fingerprint import diversification_hints, extract_fingerprint, similarity_risk
from .gate import evaluate_gate
from .gate_orchestrator import GateOrchestrator, GateRun, GateStateError
from .merge import OverrideError, apply_overrides, merge_ruleset
from .repair import build_repair_instruction
from .resolution import resolve_engine_profile
from .scoring import compute_metrics, detect_forbidden_moves, melodrama_score, nuance_score

__all__ = [
    # Defaults and merging
    "default_engine_profile",
    "default_profile_document",
    "apply_overrides",
    "merge_ruleset",
    "OverrideError",
    "resolve_engine_profile",
    # Benchmarks
    "benchmark_defaults",
    "apply_benchmark",
    "default_feel",
    "default_benchmark",
    # Fingerprinting
    "ClassificationRule",
    "classify_first",
    "collect_all",
    "extract_fingerprint",
    "similarity_risk",
    "diversification_hints",
    # Gate
    "compute_metrics",
    "melodrama_score",
    "nuance_score",
    "detect_forbidden_moves",
    "evaluate_gate",
    "build_repair_instruction",
    "GateOrchestrator",
    "GateRun",
    "GateStateError",
    # Comps
    "derive_engine_profile",
    "detect_conflicts",
    "generate_rules_summary",
]
