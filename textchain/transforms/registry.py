from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping

from chainkit import ConfigNamespace, DuplicatePolicy, RegistryBuilder, TransformRegistry


def build_transform_registry(
    transforms_cfg: Mapping[str, Any] | None = None,
    *,
    on_duplicate: DuplicatePolicy = "reject",
) -> TransformRegistry:
    """Register every text transform and freeze the result.

    `transforms_cfg` holds per-transform options (the `transforms:` config
    section). Options nobody reads are rejected.
    """

    from textchain.transforms import text  # noqa: PLC0415

    builder = RegistryBuilder(on_duplicate=on_duplicate)
    exported = getattr(text, "__all_transforms__", None)
    if isinstance(exported, (list, tuple)):
        for ref in exported:
            builder.register(ref)

    ns = ConfigNamespace(dict(transforms_cfg or {}), path="transforms")
    builder.register(text.build_drop_words(ns.namespace("drop_words", default=None)))
    ns.assert_consumed()

    return builder.freeze()


@lru_cache(maxsize=1)
def get_transform_registry() -> TransformRegistry:
    # Default options only; runs driven by config call build_transform_registry.
    return build_transform_registry()
