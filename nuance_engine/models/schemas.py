"""
Pydantic data models for the Nuance Engine.
These models define the rulebook, the fingerprint and the gate results exchanged
with the generator, the fingerprint history store and the UI.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    computed_field,
    model_validator,
)


# ============================================================================
# Enums
# ============================================================================

class Lane(str, Enum):
    """Production lane - determines the baseline creative rules."""
    VERTICAL_DRAMA = "vertical_drama"
    FEATURE_FILM = "feature_film"
    SERIES = "series"
    DOCUMENTARY = "documentary"

    @classmethod
    def parse(cls, value: Any) -> "Lane":
        """Resolve a lane name, falling back to feature_film for unknown values."""
        try:
            return cls(str(getattr(value, "value", value)).lower())
        except ValueError:
            return cls.FEATURE_FILM


class LaneClass(str, Enum):
    """
    Coarse lane class used by every lane-conditional rule.
    Resolved once from the lane name instead of repeated string matching.
    """
    VERTICAL = "vertical"
    FEATURE = "feature"
    SERIES = "series"
    DOCUMENTARY = "documentary"

    @classmethod
    def from_lane(cls, lane: Any) -> "LaneClass":
        name = str(getattr(lane, "value", lane) or "").lower()
        if "vertical" in name:
            return cls.VERTICAL
        if "feature" in name:
            return cls.FEATURE
        if "documentary" in name:
            return cls.DOCUMENTARY
        return cls.SERIES


class StoryEngine(str, Enum):
    """Story engine archetype."""
    PRESSURE_COOKER = "pressure_cooker"
    TWO_HANDER = "two_hander"
    SLOW_BURN_INVESTIGATION = "slow_burn_investigation"
    SOCIAL_REALISM = "social_realism"
    MORAL_TRAP = "moral_trap"
    CHARACTER_SPIRAL = "character_spiral"
    RASHOMON = "rashomon"
    ANTI_PLOT = "anti_plot"


class CausalGrammar(str, Enum):
    """How cause and effect propagate through the story."""
    ACCUMULATION = "accumulation"
    EROSION = "erosion"
    EXCHANGE = "exchange"
    MIRROR = "mirror"
    CONSTRAINT = "constraint"
    MISALIGNMENT = "misalignment"
    CONTAGION = "contagion"
    REVELATION_WITHOUT_FACTS = "revelation_without_facts"


class ConflictMode(str, Enum):
    """Dominant mode of conflict."""
    STATUS_REPUTATION = "status_reputation"
    MORAL_TRAP = "moral_trap"
    FAMILY_OBLIGATION = "family_obligation"
    LEGAL_PROCEDURAL = "legal_procedural"
    ROMANCE_MISALIGNMENT = "romance_misalignment"
    MONEY_PRESSURE = "money_pressure"
    POWER_ASYMMETRY = "power_asymmetry"
    IDENTITY_EXPOSURE = "identity_exposure"


class PacingFeel(str, Enum):
    """User-selected pacing feel."""
    CALM = "calm"
    STANDARD = "standard"
    PUNCHY = "punchy"
    FRENETIC = "frenetic"


class StyleBenchmark(str, Enum):
    """Creative-style preset that perturbs baseline pacing and dialogue targets."""
    GLOSSY_COMEDY = "glossy_comedy"
    ROMANTIC_BANTER = "romantic_banter"
    KDRAMA_ROMANCE = "kdrama_romance"
    WORKPLACE_POWER_GAMES = "workplace_power_games"
    THRILLER_MYSTERY = "thriller_mystery"
    PRESTIGE_INTIMATE = "prestige_intimate"
    SOAP_MELODRAMA = "soap_melodrama"
    YOUTH_ASPIRATIONAL = "youth_aspirational"
    SATIRE_SYSTEMS = "satire_systems"
    ACTION_PULSE = "action_pulse"


class StakesType(str, Enum):
    PERSONAL = "personal"
    SOCIAL = "social"
    SYSTEMIC = "systemic"
    GLOBAL = "global"


class TwistCountBucket(str, Enum):
    NONE = "0"
    ONE = "1"
    MANY = "2+"


class AntagonistType(str, Enum):
    PERSON = "person"
    SELF = "self"
    SYSTEM = "system"
    RELATIONSHIP = "relationship"


class EndingType(str, Enum):
    AMBIGUOUS = "ambiguous"
    RECONCILIATION = "reconciliation"
    ACCEPTANCE = "acceptance"
    ESCAPE = "escape"
    JUSTICE = "justice"
    TRAGEDY = "tragedy"


class IncitingIncidentCategory(str, Enum):
    DISCOVERY = "discovery"
    LOSS = "loss"
    OFFER = "offer"
    MISTAKE = "mistake"
    ARRIVAL = "arrival"
    ACCUSATION = "accusation"


class SettingTag(str, Enum):
    URBAN = "urban"
    RURAL = "rural"
    WORKPLACE = "workplace"
    DOMESTIC = "domestic"
    MEDICAL = "medical"
    EDUCATIONAL = "educational"
    LEGAL = "legal"


class GateFailure(str, Enum):
    """
    Gate failure codes. Declaration order is the canonical order used for
    failure lists and repair directives.
    """
    MELODRAMA = "MELODRAMA"
    OVERCOMPLEXITY = "OVERCOMPLEXITY"
    TEMPLATE_SIMILARITY = "TEMPLATE_SIMILARITY"
    STAKES_TOO_BIG_TOO_EARLY = "STAKES_TOO_BIG_TOO_EARLY"
    TWIST_OVERUSE = "TWIST_OVERUSE"
    SUBTEXT_MISSING = "SUBTEXT_MISSING"
    QUIET_BEATS_MISSING = "QUIET_BEATS_MISSING"
    MEANING_SHIFT_MISSING = "MEANING_SHIFT_MISSING"
    FORBIDDEN_MOVE_PRESENT = "FORBIDDEN_MOVE_PRESENT"


class GateState(str, Enum):
    """States of a single gate run."""
    NOT_STARTED = "not_started"
    ATTEMPT0_EVALUATED = "attempt0_evaluated"
    REPAIRED = "repaired"
    ATTEMPT1_EVALUATED = "attempt1_evaluated"
    FINALIZED = "finalized"


# ============================================================================
# Engine Profile Models
# ============================================================================

class EngineSettingsBlock(BaseModel):
    """Story engine triple."""
    model_config = ConfigDict(extra="allow")

    story_engine: StoryEngine = StoryEngine.PRESSURE_COOKER
    causal_grammar: CausalGrammar = CausalGrammar.ACCUMULATION
    conflict_mode: ConflictMode = ConflictMode.MORAL_TRAP


class BeatsPerMinute(BaseModel):
    min: float = Field(2.0, ge=0)
    target: float = Field(3.0, ge=0)
    max: float = Field(5.0, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "BeatsPerMinute":
        if not self.min <= self.target <= self.max:
            raise ValueError(
                f"beats_per_minute must satisfy min <= target <= max "
                f"(got {self.min}, {self.target}, {self.max})"
            )
        return self


class CliffhangerRate(BaseModel):
    target: float = Field(0.5, ge=0)
    max: float = Field(0.7, ge=0)


class PacingProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    beats_per_minute: BeatsPerMinute = Field(default_factory=BeatsPerMinute)
    cliffhanger_rate: CliffhangerRate = Field(default_factory=CliffhangerRate)
    quiet_beats_min: int = Field(3, ge=0)
    subtext_scenes_min: int = Field(4, ge=0)
    meaning_shifts_min_per_act: int = Field(1, ge=0)


class StakesLadder(BaseModel):
    model_config = ConfigDict(extra="allow")

    early_allowed: List[StakesType] = Field(default_factory=lambda: [StakesType.PERSONAL])
    no_global_before_pct: float = Field(
        0.20,
        ge=0,
        le=1,
        description="Story fraction (from the start) before which only early_allowed stakes may appear",
    )
    late_allowed: List[StakesType] = Field(default_factory=lambda: [StakesType.SYSTEMIC])
    notes: str = ""


class Budgets(BaseModel):
    model_config = ConfigDict(extra="allow")

    drama_budget: int = Field(2, ge=0)
    twist_cap: int = Field(1, ge=0)
    big_reveal_cap: int = Field(1, ge=0)
    plot_thread_cap: int = Field(3, ge=0)
    core_character_cap: int = Field(5, ge=0)
    faction_cap: int = Field(1, ge=0)
    coincidence_cap: int = Field(1, ge=0)


class DialogueRules(BaseModel):
    model_config = ConfigDict(extra="allow")

    subtext_ratio_target: float = Field(0.55, ge=0, le=1)
    monologue_max_lines: int = Field(6, ge=0)
    no_speeches: bool = True
    absolute_words_penalty: bool = True


class TextureRules(BaseModel):
    model_config = ConfigDict(extra="allow")

    money_time_institution_required: bool = True
    cost_of_action_required: bool = True
    admin_violence_preferred: bool = True


class AntagonismModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    primary: AntagonistType = AntagonistType.SYSTEM
    legitimacy_required: bool = True
    no_omnipotence: bool = True


class GateThresholds(BaseModel):
    model_config = ConfigDict(extra="allow")

    melodrama_max: float = Field(0.50, ge=0)
    similarity_max: float = Field(0.60, ge=0)
    complexity_threads_max: int = Field(3, ge=0)
    complexity_factions_max: int = Field(1, ge=0)
    complexity_core_chars_max: int = Field(5, ge=0)


class CompInfluencer(BaseModel):
    """A comparable title influencing the derived profile."""
    title: str = "Unknown"
    year: Optional[int] = None
    format: str = "film"
    weight: float = Field(1.0, ge=0)
    dimensions: List[str] = Field(default_factory=list)
    avoid_tags: List[str] = Field(default_factory=list)


class CompsBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    influencers: List[CompInfluencer] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class EngineProfile(BaseModel):
    """
    Resolved rulebook for one generation context.
    Treated as immutable once resolved; derive new profiles with model_copy or the merger.
    """
    model_config = ConfigDict(extra="allow")

    version: str = "1.0"
    lane: Lane = Lane.FEATURE_FILM
    comps: CompsBlock = Field(default_factory=CompsBlock)
    engine: EngineSettingsBlock = Field(default_factory=EngineSettingsBlock)
    pacing_profile: PacingProfile = Field(default_factory=PacingProfile)
    stakes_ladder: StakesLadder = Field(default_factory=StakesLadder)
    budgets: Budgets = Field(default_factory=Budgets)
    dialogue_rules: DialogueRules = Field(default_factory=DialogueRules)
    texture_rules: TextureRules = Field(default_factory=TextureRules)
    antagonism_model: AntagonismModel = Field(default_factory=AntagonismModel)
    forbidden_moves: List[str] = Field(default_factory=list)
    signature_devices: List[str] = Field(default_factory=list)
    gate_thresholds: GateThresholds = Field(default_factory=GateThresholds)

    @property
    def lane_class(self) -> LaneClass:
        return LaneClass.from_lane(self.lane)

    def to_document(self) -> Dict[str, Any]:
        """JSON-compatible document used by the override merger."""
        return self.model_dump(mode="json")


# ============================================================================
# Override Patches
# ============================================================================

class ReplacePatch(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    op: Literal["replace"] = "replace"
    path: str
    value: Any = None


class AddPatch(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    op: Literal["add"] = "add"
    path: str
    value: Any = None


class RemovePatch(BaseModel):
    """Remove never carries a value; extra="forbid" rejects one."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    op: Literal["remove"] = "remove"
    path: str


OverridePatch = Annotated[
    Union[ReplacePatch, AddPatch, RemovePatch],
    Field(discriminator="op"),
]

OVERRIDE_PATCH_ADAPTER: TypeAdapter = TypeAdapter(OverridePatch)


# ============================================================================
# Benchmark Models
# ============================================================================

class DialogueTargets(BaseModel):
    subtext_ratio_target: float
    monologue_max_lines: int


class BenchmarkResult(BaseModel):
    """Derived pacing/dialogue targets for a (lane, feel, benchmark) triple."""
    beats_per_minute: BeatsPerMinute
    quiet_beats_min: int = Field(..., ge=0)
    subtext_scenes_min: int = Field(..., ge=0)
    meaning_shifts_min_per_act: int = Field(..., ge=0)
    dialogue: Optional[DialogueTargets] = None


# ============================================================================
# Fingerprint Models
# ============================================================================

class RulesetFingerprint(BaseModel):
    """Structural summary of one generated text."""
    model_config = ConfigDict(frozen=True)

    lane: Lane
    story_engine: StoryEngine
    causal_grammar: CausalGrammar
    conflict_mode: ConflictMode
    stakes_type: StakesType = StakesType.PERSONAL
    twist_count_bucket: TwistCountBucket = TwistCountBucket.NONE
    antagonist_type: AntagonistType = AntagonistType.PERSON
    ending_type: EndingType = EndingType.AMBIGUOUS
    inciting_incident_category: IncitingIncidentCategory = IncitingIncidentCategory.DISCOVERY
    setting_texture_tags: List[SettingTag] = Field(default_factory=list, max_length=5)


class DiversificationHints(BaseModel):
    """Categories overused in recent history."""
    avoid_engines: List[StoryEngine] = Field(default_factory=list)
    avoid_grammars: List[CausalGrammar] = Field(default_factory=list)
    avoid_stakes_types: List[StakesType] = Field(default_factory=list)
    avoid_conflict_modes: List[ConflictMode] = Field(default_factory=list)
    avoid_inciting_categories: List[IncitingIncidentCategory] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any((
            self.avoid_engines,
            self.avoid_grammars,
            self.avoid_stakes_types,
            self.avoid_conflict_modes,
            self.avoid_inciting_categories,
        ))


# ============================================================================
# Gate Models
# ============================================================================

class NuanceMetrics(BaseModel):
    """Raw measurements behind a gate verdict."""
    word_count: int = 0
    absolute_words_rate: float = 0.0
    twist_count: int = 0
    twist_keyword_rate: float = 0.0
    conspiracy_markers: int = 0
    shock_events_early: int = 0
    speech_length_proxy: int = 0
    named_factions: int = 0
    plot_thread_count: int = 0
    character_introductions: int = 0
    new_character_density: float = 0.0
    subtext_scene_count: int = 0
    quiet_beats_count: int = 0
    meaning_shift_count: int = 0
    antagonist_legitimacy: bool = False
    cost_of_action_markers: int = 0
    similarity_risk: float = 0.0
    early_stakes: List[StakesType] = Field(default_factory=list)
    found_forbidden_moves: List[str] = Field(default_factory=list)


class GateVerdict(BaseModel):
    """Pass/fail and scores of an attempt."""
    model_config = ConfigDict(populate_by_name=True)

    failures: List[GateFailure] = Field(default_factory=list)
    melodrama_score: float = Field(0.0, ge=0, le=1)
    nuance_score: float = Field(0.0, ge=0, le=1)

    @computed_field(alias="pass")
    @property
    def passed(self) -> bool:
        return len(self.failures) == 0


class GateAttempt(GateVerdict):
    """One evaluation result."""
    metrics: NuanceMetrics = Field(default_factory=NuanceMetrics)
    fingerprint: Optional[RulesetFingerprint] = None

    def verdict(self) -> GateVerdict:
        return GateVerdict(
            failures=list(self.failures),
            melodrama_score=self.melodrama_score,
            nuance_score=self.nuance_score,
        )


class NuanceGateResult(BaseModel):
    """Outcome of a full attempt0 -> (repair -> attempt1) gate run."""
    attempt0: GateAttempt
    attempt1: Optional[GateAttempt] = None
    final: GateVerdict
    repair_instruction: Optional[str] = None
    final_text: str = ""
    states: List[GateState] = Field(default_factory=list)

    @model_validator(mode="after")
    def _final_tracks_authoritative_attempt(self) -> "NuanceGateResult":
        authoritative = self.attempt1 if self.attempt1 is not None else self.attempt0
        if self.final.failures != authoritative.failures:
            which = "attempt1" if self.attempt1 is not None else "attempt0"
            raise ValueError(f"final must reflect {which}")
        return self


# ============================================================================
# Conflict Models
# ============================================================================

class ProfileConflict(BaseModel):
    """Tension between a derived profile and its lane defaults."""
    id: str
    severity: Literal["warn", "hard"]
    dimension: str
    message: str
    inferred_value: str
    expected_value: str
    suggested_actions: List[str] = Field(default_factory=list)
