"""
Nuance Engine Data Models Module
Pydantic schemas for rule profiles, fingerprints and gate results.
"""

from .schemas import (
    # Enums
    AntagonistType,
    CausalGrammar,
    ConflictMode,
    EndingType,
    GateFailure,
    GateState,
    IncitingIncidentCategory,
    Lane,
    LaneClass,
    PacingFeel,
    SettingTag,
    StakesType,
    StoryEngine,
    StyleBenchmark,
    TwistCountBucket,
    # Profile Models
    AntagonismModel,
    BeatsPerMinute,
    Budgets,
    CliffhangerRate,
    CompInfluencer,
    CompsBlock,
    DialogueRules,
    EngineProfile,
    EngineSettingsBlock,
    GateThresholds,
    PacingProfile,
    StakesLadder,
    TextureRules,
    # Override Models
    OVERRIDE_PATCH_ADAPTER,
    AddPatch,
    OverridePatch,
    RemovePatch,
    ReplacePatch,
    # Benchmark Models
    BenchmarkResult,
    DialogueTargets,
    # Fingerprint Models
    DiversificationHints,
    RulesetFingerprint,
    # Gate Models
    GateAttempt,
    GateVerdict,
    NuanceGateResult,
    NuanceMetrics,
    # Conflict Models
    ProfileConflict,
)

__all__ = [
    "AntagonistType",
    "CausalGrammar",
    "ConflictMode",
    "EndingType",
    "GateFailure",
    "GateState",
    "IncitingIncidentCategory",
    "Lane",
    "LaneClass",
    "PacingFeel",
    "SettingTag",
    "StakesType",
    "StoryEngine",
    "StyleBenchmark",
    "TwistCountBucket",
    "AntagonismModel",
    "BeatsPerMinute",
    "Budgets",
    "CliffhangerRate",
    "CompInfluencer",
    "CompsBlock",
    "DialogueRules",
    "EngineProfile",
    "EngineSettingsBlock",
    "GateThresholds",
    "PacingProfile",
    "StakesLadder",
    "TextureRules",
    "OVERRIDE_PATCH_ADAPTER",
    "AddPatch",
    "OverridePatch",
    "RemovePatch",
    "ReplacePatch",
    "BenchmarkResult",
    "DialogueTargets",
    "DiversificationHints",
    "RulesetFingerprint",
    "GateAttempt",
    "GateVerdict",
    "NuanceGateResult",
    "NuanceMetrics",
    "ProfileConflict",
]
