"""
Profile Resolution

Full resolution for one generation request: lane base defaults, saved engine
profile, style benchmark, project overrides and run overrides.

The benchmark is folded in directly above the saved profile, so explicit
project or run overrides on pacing still win over benchmark-derived targets.
"""

import logging
from typing import Any, Iterable, Optional

from ..models import EngineProfile, Lane
from .benchmarks import benchmark_defaults, benchmark_patches, default_feel
from .defaults import default_engine_profile
from .merge import PatchLike, ProfileLike, apply_overrides, merge_ruleset

logger = logging.getLogger("nuance_engine.resolution")


def resolve_engine_profile(
    lane: Any,
    saved_profile: Optional[ProfileLike] = None,
    project_patches: Optional[Iterable[PatchLike]] = None,
    run_patches: Optional[Iterable[PatchLike]] = None,
    benchmark: Any = None,
    feel: Any = None,
    strict: bool = False,
) -> EngineProfile:
    """
    Resolve the EngineProfile for a generation request.

    When neither benchmark nor feel is given the pacing section is left as the
    saved profile (or lane base) defines it.

    Args:
        lane: Production lane; unknown lanes resolve to feature_film
        saved_profile: Previously saved engine profile, if any
        project_patches: Project-scoped overrides
        run_patches: Run-only overrides
        benchmark: Optional style benchmark
        feel: Optional pacing feel; defaults to the lane's feel when a benchmark is set
        strict: Raise OverrideError instead of degrading

    Returns:
        Resolved EngineProfile
    """
    resolved_lane = Lane.parse(lane)
    base = default_engine_profile(resolved_lane)
    start: ProfileLike = saved_profile if saved_profile is not None else base

    if benchmark is not None or feel is not None:
        effective_feel = feel if feel is not None else default_feel(resolved_lane)
        result = benchmark_defaults(resolved_lane, benchmark, effective_feel)
        logger.info(
            f"[resolve_engine_profile] Folding benchmark={getattr(benchmark, 'value', benchmark)} "
            f"feel={getattr(effective_feel, 'value', effective_feel)} into {resolved_lane.value} profile"
        )
        start = apply_overrides(start, benchmark_patches(result), strict=strict)

    return merge_ruleset(
        base,
        saved_profile=start,
        project_patches=project_patches,
        run_patches=run_patches,
        strict=strict,
    )
