"""Resolve an ordered list of transform ids into a single `Pipeline`.

The order list is supplied by the caller (configuration, CLI, database); the
composer never decides execution order itself. How unresolved ids are handled
is an explicit caller choice:

- "fail_fast": the first unresolved id raises `UnknownIdentifier` carrying its
  position in the order list; no pipeline is produced.
- "skip_unresolved": unresolved ids are dropped and returned in
  `Composition.skipped` so the caller can report them.

The composer does not log. Reporting skipped ids is the caller's job.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from chainkit.config_namespace import ConfigNamespace
from chainkit.errors import UnknownIdentifier
from chainkit.pipeline import Pipeline
from chainkit.transform_registry import RegistryBuilder, TransformRegistry
from chainkit.transform_types import TransformRef

UnresolvedPolicy = Literal["fail_fast", "skip_unresolved"]
FAIL_FAST: UnresolvedPolicy = "fail_fast"
SKIP_UNRESOLVED: UnresolvedPolicy = "skip_unresolved"
ALLOWED_UNRESOLVED_POLICIES: tuple[str, ...] = (FAIL_FAST, SKIP_UNRESOLVED)


@dataclass(frozen=True)
class Composition:
    pipeline: Pipeline
    policy: UnresolvedPolicy
    skipped: tuple[str, ...] = ()
    skipped_positions: tuple[int, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def ok(self) -> bool:
        return not self.skipped


def _validate_policy(policy: Any) -> UnresolvedPolicy:
    if policy not in ALLOWED_UNRESOLVED_POLICIES:
        raise ValueError(
            f"Unresolved-id policy must be one of: {', '.join(ALLOWED_UNRESOLVED_POLICIES)} "
            f"(got {policy!r})"
        )
    return policy


def _normalize_order(order: Any) -> tuple[str, ...]:
    if isinstance(order, (str, bytes)) or not isinstance(order, Sequence):
        raise TypeError(f"order must be a sequence of transform ids (type={type(order).__name__})")
    for idx, item in enumerate(order):
        if not isinstance(item, str):
            raise TypeError(f"order[{idx}] must be a string (type={type(item).__name__})")
    return tuple(order)


def _snapshot(registry: Any) -> TransformRegistry:
    if isinstance(registry, (TransformRegistry, RegistryBuilder)):
        return registry.snapshot()
    raise TypeError(
        "registry must be a TransformRegistry or RegistryBuilder "
        f"(type={type(registry).__name__})"
    )


def compose(
    order: Sequence[str],
    registry: TransformRegistry | RegistryBuilder,
    *,
    policy: UnresolvedPolicy,
) -> Composition:
    """Resolve `order` against a snapshot of `registry` and fold it into a pipeline.

    Steps run in list order, first element first. Repeated ids run repeatedly.
    An empty order list (or one whose ids were all skipped) yields the identity
    pipeline.
    """

    mode = _validate_policy(policy)
    ids = _normalize_order(order)
    snapshot = _snapshot(registry)

    resolved: list[TransformRef] = []
    skipped: list[str] = []
    skipped_positions: list[int] = []
    for position, transform_id in enumerate(ids):
        ref = snapshot.lookup(transform_id)
        if ref is not None:
            resolved.append(ref)
            continue
        if mode == FAIL_FAST:
            raise UnknownIdentifier(
                transform_id,
                position,
                available=snapshot.available(),
                suggestions=snapshot.suggest(transform_id),
            )
        skipped.append(transform_id)
        skipped_positions.append(position)

    pipeline = Pipeline(steps=tuple(resolved))
    metadata: dict[str, Any] = {
        "policy": mode,
        "order": list(ids),
        "resolved": list(pipeline.transform_ids),
    }
    if skipped:
        metadata["skipped"] = [
            {"transform_id": transform_id, "position": position}
            for transform_id, position in zip(skipped, skipped_positions)
        ]

    return Composition(
        pipeline=pipeline,
        policy=mode,
        skipped=tuple(skipped),
        skipped_positions=tuple(skipped_positions),
        metadata=metadata,
    )


def compose_from_config(
    cfg: Mapping[str, Any] | ConfigNamespace,
    registry: TransformRegistry | RegistryBuilder,
    *,
    path: str = "pipeline",
) -> Composition:
    """Compose from a `{"order": [...], "on_unresolved": ...}` mapping.

    Both keys are required and unknown keys are rejected.
    """

    ns = cfg if isinstance(cfg, ConfigNamespace) else ConfigNamespace(cfg, path=path)
    order = ns.get_list_str("order", allow_empty=True)
    policy = ns.get_str("on_unresolved", choices=ALLOWED_UNRESOLVED_POLICIES)
    ns.assert_consumed()
    return compose(order, registry, policy=policy)  # type: ignore[arg-type]
