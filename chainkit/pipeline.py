"""Composed transformation pipelines.

This module is intentionally app-agnostic and must not import `textchain.*`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Protocol, TypeVar

from chainkit.transform_types import TransformRef

T = TypeVar("T")


def identity(value: T) -> T:
    """Fold seed: returns its input unchanged."""
    return value


@dataclass(frozen=True)
class Composed:
    """Left-to-right composition of callables.

    Always flat: composing two `Composed` values concatenates their tuples, so
    call depth stays constant no matter how long the order list is.
    """

    fns: tuple[Callable[[Any], Any], ...]

    def __call__(self, value: Any) -> Any:
        for fn in self.fns:
            value = fn(value)
        return value


def _flatten(fn: Callable[[Any], Any]) -> tuple[Callable[[Any], Any], ...]:
    if fn is identity:
        return ()
    if isinstance(fn, Composed):
        return fn.fns
    return (fn,)


def compose_two(first: Callable[[Any], Any], second: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Return a callable equivalent to `second(first(value))`."""

    if not callable(first) or not callable(second):
        raise TypeError("compose_two arguments must be callable")

    fns = _flatten(first) + _flatten(second)
    if not fns:
        return identity
    if len(fns) == 1:
        return fns[0]
    return Composed(fns=fns)


class StepRecorder(Protocol):
    def on_step_start(self, path: str, **metrics: Any) -> None:
        ...

    def on_step_end(self, record: dict[str, Any]) -> None:
        ...

    def on_step_error(self, path: str, transform_id: str, exc: Exception) -> None:
        ...


class DefaultStepRecorder:
    """Log each step through a caller-owned logger."""

    def __init__(self, logger: logging.Logger, *, level: int = logging.DEBUG) -> None:
        self.logger = logger
        self.level = level

    def on_step_start(self, path: str, **metrics: Any) -> None:
        tokens: list[str] = []
        source = metrics.get("source")
        if isinstance(source, str) and source.strip():
            tokens.append(f"source={source.strip()}")
        tokens.append(f"input_type={metrics.get('input_type') or '<unknown>'}")
        self.logger.log(self.level, "Transform: %s (%s)", path, ", ".join(tokens))

    def on_step_end(self, record: dict[str, Any]) -> None:
        self.logger.log(
            self.level,
            "Completed transform %s (elapsed_ms=%.3f)",
            record.get("path", "<unknown>"),
            float(record.get("elapsed_ms", 0.0) or 0.0),
        )

    def on_step_error(self, path: str, transform_id: str, exc: Exception) -> None:
        self.logger.error("Transform failed: %s (id=%s): %s", path, transform_id, exc)


class NullStepRecorder:
    def on_step_start(self, path: str, **metrics: Any) -> None:
        return

    def on_step_end(self, record: dict[str, Any]) -> None:
        return

    def on_step_error(self, path: str, transform_id: str, exc: Exception) -> None:
        return


def _validate_recorder(recorder: Any) -> None:
    for name in ("on_step_start", "on_step_end", "on_step_error"):
        method = getattr(recorder, name, None)
        if method is None or not callable(method):
            raise TypeError(f"Step recorder missing required method: {name}")


def _fold(steps: Iterable[TransformRef]) -> Callable[[Any], Any]:
    composed: Callable[[Any], Any] = identity
    for ref in steps:
        composed = compose_two(composed, ref.fn)
    return composed


@dataclass(frozen=True)
class Pipeline:
    """A single composed transformation built from resolved steps.

    Holds no mutable state; `apply` may be called concurrently from any number
    of threads as long as the individual transformations are pure.
    """

    steps: tuple[TransformRef, ...] = ()
    fn: Callable[[Any], Any] = field(default=identity, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        steps = tuple(self.steps)
        for idx, ref in enumerate(steps):
            if not isinstance(ref, TransformRef):
                raise TypeError(
                    f"Pipeline.steps[{idx}] must be a TransformRef (type={type(ref).__name__})"
                )
        object.__setattr__(self, "steps", steps)
        object.__setattr__(self, "fn", _fold(steps))

    @classmethod
    def identity(cls) -> "Pipeline":
        return cls(steps=())

    @property
    def transform_ids(self) -> tuple[str, ...]:
        return tuple(ref.id for ref in self.steps)

    @property
    def is_identity(self) -> bool:
        return not self.steps

    def __len__(self) -> int:
        return len(self.steps)

    def apply(self, value: Any) -> Any:
        return self.fn(value)

    def __call__(self, value: Any) -> Any:
        return self.fn(value)

    def then(self, other: "Pipeline") -> "Pipeline":
        """Pipeline that runs `self` first and feeds its output into `other`."""

        if not isinstance(other, Pipeline):
            raise TypeError(f"Pipeline.then expects a Pipeline (type={type(other).__name__})")
        return Pipeline(steps=self.steps + other.steps)

    def run(self, value: Any, *, recorder: StepRecorder | None = None) -> Any:
        """Apply step by step, reporting each step to `recorder`.

        Produces the same result as `apply`. Errors raised by a transformation
        are reported and then re-raised unchanged.
        """

        recorder = recorder or NullStepRecorder()
        _validate_recorder(recorder)

        for idx, ref in enumerate(self.steps):
            path = f"pipeline/{idx:02d}:{ref.id}"
            recorder.on_step_start(
                path,
                transform_id=ref.id,
                index=idx,
                source=ref.source,
                input_type=type(value).__name__,
            )
            started = time.perf_counter()
            try:
                value = ref.fn(value)
            except Exception as exc:
                recorder.on_step_error(path, ref.id, exc)
                raise
            recorder.on_step_end(
                {
                    "path": path,
                    "transform_id": ref.id,
                    "index": idx,
                    "elapsed_ms": (time.perf_counter() - started) * 1000.0,
                    "output_type": type(value).__name__,
                }
            )
        return value

    def describe(self) -> tuple[dict[str, Any], ...]:
        return tuple(
            {
                "index": idx,
                "transform_id": ref.id,
                "doc": ref.doc,
                "source": ref.source,
                "tags": list(ref.tags),
            }
            for idx, ref in enumerate(self.steps)
        )
