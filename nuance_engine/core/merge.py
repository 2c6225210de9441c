"""
Ruleset Merger for the Nuance Engine

Applies ordered layers of override patches onto a base profile document:

    lane base  <  saved engine profile  <  project overrides  <  run overrides

Later layers always win on conflicting paths.

Override paths are slash-delimited (`/budgets/twist_cap`, `/forbidden_moves/0`).
A path that cannot be resolved partway is a no-op rather than an error: a broken
override must not block a generation run. Callers that prefer hard failures pass
`strict=True` and get an OverrideError instead.
"""

import copy
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ValidationError

from ..models import (
    OVERRIDE_PATCH_ADAPTER,
    AddPatch,
    EngineProfile,
    RemovePatch,
    ReplacePatch,
)

logger = logging.getLogger("nuance_engine.merge")

PatchLike = Union[ReplacePatch, AddPatch, RemovePatch, Mapping[str, Any]]
ProfileLike = Union[EngineProfile, Mapping[str, Any]]

# Upper bound on revert-and-revalidate passes during resolution
MAX_RESOLUTION_PASSES = 8


class OverrideError(ValueError):
    """Raised in strict mode when a patch or a patched value cannot be applied."""

    def __init__(self, patch: Any, reason: str):
        self.patch = patch
        self.reason = reason
        super().__init__(f"Override {describe_patch(patch)} rejected: {reason}")


def describe_patch(patch: Any) -> str:
    if isinstance(patch, BaseModel):
        patch = patch.model_dump()
    if isinstance(patch, Mapping):
        return f"{patch.get('op', '?')} {patch.get('path', '?')}"
    return repr(patch)


def parse_path(path: str) -> List[str]:
    """Split a slash-delimited path. `/` inside keys is not supported."""
    return [segment for segment in (path or "").split("/") if segment]


def _degrade(strict: bool, patch: Any, reason: str) -> None:
    if strict:
        raise OverrideError(patch, reason)
    logger.warning(f"[apply_overrides] Ignoring {describe_patch(patch)}: {reason}")


def coerce_patch(raw: PatchLike, strict: bool = False):
    """Validate a raw patch mapping into its tagged variant, or None if malformed."""
    if isinstance(raw, (ReplacePatch, AddPatch, RemovePatch)):
        return raw
    try:
        return OVERRIDE_PATCH_ADAPTER.validate_python(raw)
    except ValidationError as e:
        _degrade(strict, raw, f"malformed patch ({e.error_count()} validation error(s))")
        return None


def _list_index(container: List[Any], segment: str, allow_end: bool = False) -> Optional[int]:
    if not segment.isdigit():
        return None
    index = int(segment)
    upper = len(container) if allow_end else len(container) - 1
    return index if index <= upper else None


def _apply_patch(document: Dict[str, Any], patch, strict: bool) -> None:
    segments = parse_path(patch.path)
    if not segments:
        _degrade(strict, patch, "empty path")
        return

    target: Any = document
    for segment in segments[:-1]:
        if isinstance(target, dict):
            if segment not in target:
                if patch.op == "remove":
                    _degrade(strict, patch, f"missing segment '{segment}'")
                    return
                target[segment] = {}
            target = target[segment]
        elif isinstance(target, list):
            index = _list_index(target, segment)
            if index is None:
                _degrade(strict, patch, f"index '{segment}' out of range")
                return
            target = target[index]
        else:
            _degrade(strict, patch, f"segment '{segment}' traverses a scalar")
            return

    leaf = segments[-1]
    if isinstance(target, dict):
        if patch.op == "remove":
            if leaf not in target:
                _degrade(strict, patch, f"missing key '{leaf}'")
                return
            del target[leaf]
        else:
            target[leaf] = copy.deepcopy(patch.value)
    elif isinstance(target, list):
        if patch.op == "remove":
            index = _list_index(target, leaf)
            if index is None:
                _degrade(strict, patch, f"index '{leaf}' out of range")
                return
            target.pop(index)
        elif patch.op == "add":
            index = len(target) if leaf == "-" else _list_index(target, leaf, allow_end=True)
            if index is None:
                _degrade(strict, patch, f"index '{leaf}' out of range")
                return
            target.insert(index, copy.deepcopy(patch.value))
        else:
            index = _list_index(target, leaf)
            if index is None:
                _degrade(strict, patch, f"index '{leaf}' out of range")
                return
            target[index] = copy.deepcopy(patch.value)
    else:
        _degrade(strict, patch, f"leaf '{leaf}' is inside a scalar")


def to_document(profile: ProfileLike) -> Dict[str, Any]:
    """Deep-copied JSON document for a profile or profile mapping."""
    if isinstance(profile, BaseModel):
        return profile.model_dump(mode="json")
    return copy.deepcopy(dict(profile))


def apply_overrides(
    profile: ProfileLike,
    patches: Iterable[PatchLike],
    strict: bool = False,
) -> Dict[str, Any]:
    """
    Apply override patches in order to a deep copy of a profile document.

    replace/add create missing intermediate objects; add on an array inserts
    at the index ("-" appends). remove splices array items or deletes keys.
    Unresolvable paths are no-ops (or OverrideError when strict).

    Args:
        profile: EngineProfile or profile document; never mutated
        patches: Override patches (models or raw mappings)
        strict: Raise instead of skipping

    Returns:
        The patched document
    """
    document = to_document(profile)
    for raw in patches or []:
        patch = coerce_patch(raw, strict)
        if patch is not None:
            _apply_patch(document, patch, strict)
    return document


# ============================================================================
# Resolution
# ============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_beats_per_minute(document: Dict[str, Any]) -> None:
    """Restore min <= target <= max in place when all three are numeric."""
    pacing = document.get("pacing_profile")
    if not isinstance(pacing, dict):
        return
    bpm = pacing.get("beats_per_minute")
    if not isinstance(bpm, dict):
        return
    values = [bpm.get("min"), bpm.get("target"), bpm.get("max")]
    if not all(_is_number(v) for v in values):
        return
    low, target, high = values
    if low > high:
        logger.warning(f"[normalize_beats_per_minute] Swapping min {low} and max {high}")
        low, high = high, low
    clamped = min(max(target, low), high)
    if clamped != target:
        logger.warning(f"[normalize_beats_per_minute] Clamping target {target} into [{low}, {high}]")
    bpm.update({"min": low, "target": clamped, "max": high})


def _lookup(document: Any, loc: Sequence[Any]) -> Tuple[bool, Any]:
    node = document
    for part in loc:
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and isinstance(part, int) and 0 <= part < len(node):
            node = node[part]
        else:
            return False, None
    return True, node


def _revert(document: Dict[str, Any], fallback: Dict[str, Any], loc: Sequence[Any]) -> None:
    found, value = _lookup(fallback, loc)
    parent_found, parent = _lookup(document, loc[:-1])
    if not parent_found or not isinstance(parent, dict):
        # Parent is itself malformed; revert one level up
        if len(loc) > 1:
            _revert(document, fallback, loc[:-1])
        return
    if found:
        parent[loc[-1]] = copy.deepcopy(value)
    else:
        parent.pop(loc[-1], None)


def resolve_document(
    document: Mapping[str, Any],
    fallback: Optional[Mapping[str, Any]] = None,
    strict: bool = False,
) -> EngineProfile:
    """
    Validate a patched document into an EngineProfile.

    Values the schema rejects are reverted to the fallback document's value
    (normally the lane base) and logged; in strict mode they raise OverrideError.
    """
    working = copy.deepcopy(dict(document))
    normalize_beats_per_minute(working)
    fallback_doc = to_document(fallback) if fallback is not None else EngineProfile().to_document()

    for _ in range(MAX_RESOLUTION_PASSES):
        try:
            return EngineProfile.model_validate(working)
        except ValidationError as e:
            if strict:
                raise OverrideError(
                    {"op": "resolve", "path": "/"},
                    f"patched profile is invalid: {e.errors()[0]['msg']}",
                ) from e
            for error in e.errors():
                loc = list(error["loc"])
                # Revert whole arrays rather than single items so indices stay stable
                while loc and isinstance(loc[-1], int):
                    loc.pop()
                if not loc:
                    continue
                logger.warning(
                    f"[resolve_document] Reverting /{'/'.join(str(p) for p in loc)}: {error['msg']}"
                )
                _revert(working, fallback_doc, loc)
            normalize_beats_per_minute(working)

    logger.error("[resolve_document] Profile still invalid after reverting; using fallback")
    return EngineProfile.model_validate(fallback_doc)


def merge_ruleset(
    base: ProfileLike,
    saved_profile: Optional[ProfileLike] = None,
    project_patches: Optional[Iterable[PatchLike]] = None,
    run_patches: Optional[Iterable[PatchLike]] = None,
    strict: bool = False,
) -> EngineProfile:
    """
    Resolve the EngineProfile for one generation.

    Starts from the saved profile if present, else the lane base, then applies
    project patches and finally run patches. Precedence:
    run > project > saved profile > lane base.

    Args:
        base: Lane base profile; also the fallback for rejected values
        saved_profile: Previously saved engine profile, if any
        project_patches: Project-scoped default overrides, in order
        run_patches: One-shot overrides for this run, in order
        strict: Raise OverrideError instead of degrading to no-ops

    Returns:
        Resolved EngineProfile
    """
    start = saved_profile if saved_profile is not None else base
    project_patches = list(project_patches or [])
    run_patches = list(run_patches or [])

    document = apply_overrides(start, project_patches, strict=strict)
    document = apply_overrides(document, run_patches, strict=strict)

    logger.debug(
        f"[merge_ruleset] Resolved from {'saved profile' if saved_profile is not None else 'lane base'} "
        f"with {len(project_patches)} project and {len(run_patches)} run patch(es)"
    )
    return resolve_document(document, fallback=base, strict=strict)
