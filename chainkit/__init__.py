"""Reusable kernel for ordered transformation pipelines.

This package is intentionally independent of `textchain.*`. Where the order list
comes from, which transformations exist, and how skipped ids are reported are
decisions of the consuming application.
"""

from chainkit.composer import (
    ALLOWED_UNRESOLVED_POLICIES,
    FAIL_FAST,
    SKIP_UNRESOLVED,
    Composition,
    UnresolvedPolicy,
    compose,
    compose_from_config,
)
from chainkit.config_namespace import ConfigNamespace
from chainkit.errors import ChainError, DuplicateIdentifier, RegistryFrozenError, UnknownIdentifier
from chainkit.pipeline import (
    DefaultStepRecorder,
    NullStepRecorder,
    Pipeline,
    StepRecorder,
    compose_two,
    identity,
)
from chainkit.transform_registry import (
    ALLOWED_DUPLICATE_POLICIES,
    DuplicatePolicy,
    RegistryBuilder,
    TransformRegistry,
)
from chainkit.transform_types import Transformation, TransformRef

__all__ = [
    "ALLOWED_DUPLICATE_POLICIES",
    "ALLOWED_UNRESOLVED_POLICIES",
    "ChainError",
    "Composition",
    "ConfigNamespace",
    "DefaultStepRecorder",
    "DuplicateIdentifier",
    "DuplicatePolicy",
    "FAIL_FAST",
    "NullStepRecorder",
    "Pipeline",
    "RegistryBuilder",
    "RegistryFrozenError",
    "SKIP_UNRESOLVED",
    "StepRecorder",
    "TransformRef",
    "TransformRegistry",
    "Transformation",
    "UnknownIdentifier",
    "UnresolvedPolicy",
    "compose",
    "compose_from_config",
    "compose_two",
    "identity",
]
