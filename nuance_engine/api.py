"""
Nuance Engine - HTTP API
Ruleset resolution, benchmark defaults, fingerprinting and the nuance gate.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import create_settings_from_env
from .core import (
    GateOrchestrator,
    OverrideError,
    benchmark_defaults,
    default_engine_profile,
    detect_conflicts,
    evaluate_gate,
    extract_fingerprint,
    generate_rules_summary,
    resolve_engine_profile,
)
from .core.merge import resolve_document
from .models import (
    BenchmarkResult,
    EngineProfile,
    GateAttempt,
    NuanceGateResult,
    PacingFeel,
    ProfileConflict,
    RulesetFingerprint,
)
from .services import LLMClient, LLMTextGenerator, create_llm_client

settings = create_settings_from_env()

# Configure logging for the engine
logger = logging.getLogger("nuance_engine")
logger.setLevel(settings.log_level)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    logger.addHandler(handler)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title="Nuance Engine")

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================================================
# Request / Response Models
# ============================================================================

class ResolveRulesRequest(BaseModel):
    lane: str = Field(default_factory=lambda: settings.default_lane.value)
    saved_profile: Optional[Dict[str, Any]] = None
    project_patches: List[Dict[str, Any]] = Field(default_factory=list)
    run_patches: List[Dict[str, Any]] = Field(default_factory=list)
    benchmark: Optional[str] = None
    feel: Optional[str] = None
    strict: Optional[bool] = None  # Defaults to settings.strict_overrides


class ResolveRulesResponse(BaseModel):
    profile: Dict[str, Any]
    summary: str
    conflicts: List[ProfileConflict]


class BenchmarkRequest(BaseModel):
    lane: str = Field(default_factory=lambda: settings.default_lane.value)
    benchmark: Optional[str] = None
    feel: str = PacingFeel.STANDARD.value


class TextRequest(BaseModel):
    text: str = Field("", max_length=200000)
    lane: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None  # Resolved profile; lane defaults when absent


class GateEvaluateRequest(TextRequest):
    recent_fingerprints: List[RulesetFingerprint] = Field(default_factory=list)


class GateRunRequest(GateEvaluateRequest):
    prompt_context: str = Field("", max_length=50000)


def _profile_for(request: TextRequest) -> EngineProfile:
    lane = request.lane or (request.profile or {}).get("lane") or settings.default_lane
    base = default_engine_profile(lane)
    if request.profile is None:
        return base
    return resolve_document(request.profile, fallback=base, strict=settings.strict_overrides)


def get_llm_client() -> LLMClient:
    """LLM client for repair regeneration; 503 when no provider key is configured."""
    config = settings.generator_config()
    if not config.is_configured:
        raise HTTPException(
            status_code=503,
            detail=f"Text generator not configured (provider={config.provider.value})",
        )
    return create_llm_client(config)


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/health")
async def health():
    return {"status": "ok", "service": "nuance-engine"}


@app.post("/rules/resolve", response_model=ResolveRulesResponse)
async def resolve_rules(body: ResolveRulesRequest):
    """Resolve lane defaults, saved profile, benchmark and overrides into one profile."""
    strict = settings.strict_overrides if body.strict is None else body.strict
    try:
        profile = resolve_engine_profile(
            body.lane,
            saved_profile=body.saved_profile,
            project_patches=body.project_patches,
            run_patches=body.run_patches,
            benchmark=body.benchmark,
            feel=body.feel,
            strict=strict,
        )
    except (OverrideError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ResolveRulesResponse(
        profile=profile.to_document(),
        summary=generate_rules_summary(profile),
        conflicts=detect_conflicts(profile),
    )


@app.post("/benchmarks/defaults", response_model=BenchmarkResult)
async def benchmark_defaults_endpoint(body: BenchmarkRequest):
    return benchmark_defaults(body.lane, body.benchmark, body.feel)


@app.post("/fingerprint", response_model=RulesetFingerprint)
async def fingerprint(body: TextRequest):
    try:
        profile = _profile_for(body)
    except (OverrideError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return extract_fingerprint(body.text, profile)


@app.post("/gate/evaluate", response_model=GateAttempt)
async def gate_evaluate(body: GateEvaluateRequest):
    """Evaluate a single attempt without repair."""
    try:
        profile = _profile_for(body)
    except (OverrideError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return evaluate_gate(body.text, profile, body.recent_fingerprints)


@app.post("/gate/run", response_model=NuanceGateResult)
@limiter.limit("30/minute")
async def gate_run(body: GateRunRequest, request: Request, llm_client: LLMClient = Depends(get_llm_client)):
    """Evaluate an attempt and repair it once through the configured generator if it fails."""
    try:
        profile = _profile_for(body)
    except (OverrideError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    generator = LLMTextGenerator(
        llm_client,
        profile=profile,
        temperature=settings.generator_temperature,
    )
    orchestrator = GateOrchestrator(generator=generator)
    return await orchestrator.run(
        body.text,
        profile,
        recent_fingerprints=body.recent_fingerprints,
        prompt_context=body.prompt_context,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8002)
