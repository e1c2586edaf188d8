from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class Transformation(Protocol[T]):
    """Type-preserving unary operation. Assumed pure; purity is not enforced."""

    def __call__(self, value: T, /) -> T:
        ...


def normalize_transform_id(transform_id: Any, *, path: str = "transform_id") -> str:
    if not isinstance(transform_id, str) or not transform_id.strip():
        raise TypeError(f"{path} must be a non-empty string (got {transform_id!r})")
    return transform_id.strip()


@dataclass(frozen=True)
class TransformRef:
    id: str
    fn: Transformation[Any]
    doc: str | None = None
    source: str | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", normalize_transform_id(self.id, path="TransformRef.id"))

        if not callable(self.fn):
            raise TypeError(
                f"TransformRef.fn must be callable (id={self.id}, type={type(self.fn).__name__})"
            )
        if self.doc is not None and (not isinstance(self.doc, str) or not self.doc.strip()):
            raise TypeError("TransformRef.doc must be a non-empty string or None")
        if self.source is not None and (
            not isinstance(self.source, str) or not self.source.strip()
        ):
            raise TypeError("TransformRef.source must be a non-empty string or None")

        if self.tags:
            object.__setattr__(
                self, "tags", tuple(str(tag).strip() for tag in self.tags if str(tag).strip())
            )

    def __call__(self, value: Any) -> Any:
        return self.fn(value)
