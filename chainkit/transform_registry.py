from __future__ import annotations

import difflib
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Literal, Mapping

from chainkit.errors import DuplicateIdentifier, RegistryFrozenError, UnknownIdentifier
from chainkit.transform_types import TransformRef, Transformation

DuplicatePolicy = Literal["reject", "overwrite"]
ALLOWED_DUPLICATE_POLICIES: tuple[str, ...] = ("reject", "overwrite")


def _validate_duplicate_policy(on_duplicate: Any) -> DuplicatePolicy:
    if on_duplicate not in ALLOWED_DUPLICATE_POLICIES:
        raise ValueError(
            f"on_duplicate must be one of: {', '.join(ALLOWED_DUPLICATE_POLICIES)} "
            f"(got {on_duplicate!r})"
        )
    return on_duplicate


def _merge_refs(
    base: Mapping[str, TransformRef],
    refs: Iterable[TransformRef],
    *,
    on_duplicate: DuplicatePolicy,
) -> dict[str, TransformRef]:
    entries = dict(base)
    for ref in refs:
        if not isinstance(ref, TransformRef):
            raise TypeError(f"Expected TransformRef (type={type(ref).__name__})")
        if ref.id in entries and on_duplicate == "reject":
            raise DuplicateIdentifier(ref.id)
        entries[ref.id] = ref
    return entries


@dataclass(frozen=True, eq=False)
class TransformRegistry:
    """Read-only mapping from transform id to `TransformRef`."""

    _by_id: Mapping[str, TransformRef] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", MappingProxyType(dict(self._by_id)))

    @classmethod
    def from_refs(
        cls, refs: Iterable[TransformRef], *, on_duplicate: DuplicatePolicy = "reject"
    ) -> "TransformRegistry":
        policy = _validate_duplicate_policy(on_duplicate)
        return cls(_by_id=_merge_refs({}, refs, on_duplicate=policy))

    def snapshot(self) -> "TransformRegistry":
        return self

    def available(self) -> tuple[str, ...]:
        return tuple(sorted(self._by_id.keys()))

    def describe(self) -> tuple[dict[str, Any], ...]:
        rows: list[dict[str, Any]] = []
        for ref in sorted(self._by_id.values(), key=lambda r: r.id):
            rows.append(
                {
                    "transform_id": ref.id,
                    "doc": ref.doc,
                    "source": ref.source,
                    "tags": list(ref.tags),
                }
            )
        return tuple(rows)

    def lookup(self, transform_id: Any) -> TransformRef | None:
        if not isinstance(transform_id, str):
            return None
        return self._by_id.get(transform_id.strip())

    def resolve(self, transform_id: str) -> TransformRef:
        ref = self.lookup(transform_id)
        if ref is None:
            raise UnknownIdentifier(
                str(transform_id),
                None,
                available=self.available(),
                suggestions=self.suggest(transform_id),
            )
        return ref

    def suggest(self, transform_id: Any, *, limit: int = 3) -> tuple[str, ...]:
        key = transform_id.strip() if isinstance(transform_id, str) else ""
        if not key or not self._by_id:
            return ()
        return tuple(difflib.get_close_matches(key, list(self.available()), n=limit))

    def __contains__(self, transform_id: object) -> bool:
        return self.lookup(transform_id) is not None

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[str]:
        return iter(self.available())


class RegistryBuilder:
    """Construct-then-freeze builder for `TransformRegistry`.

    Registration, rebuild and snapshot are serialized by a lock; snapshots are
    copies, so later registrations never leak into an earlier snapshot.

    Duplicate ids follow `on_duplicate`: "reject" raises `DuplicateIdentifier`
    and leaves the builder unchanged, "overwrite" replaces the entry. Prefer
    "reject" outside of test fixtures.
    """

    def __init__(self, *, on_duplicate: DuplicatePolicy = "reject") -> None:
        self._on_duplicate = _validate_duplicate_policy(on_duplicate)
        self._entries: dict[str, TransformRef] = {}
        self._frozen = False
        self._lock = threading.Lock()

    @property
    def on_duplicate(self) -> DuplicatePolicy:
        return self._on_duplicate

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        transform: TransformRef | str,
        fn: Transformation[Any] | None = None,
        *,
        doc: str | None = None,
        source: str | None = None,
        tags: tuple[str, ...] = (),
    ) -> TransformRef:
        if isinstance(transform, TransformRef):
            if fn is not None:
                raise TypeError("register(TransformRef) does not accept a separate fn")
            ref = transform
        else:
            if fn is None:
                raise TypeError("register(transform_id, fn) requires fn")
            ref = TransformRef(id=transform, fn=fn, doc=doc, source=source, tags=tuple(tags))

        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(ref.id)
            self._entries = _merge_refs(self._entries, [ref], on_duplicate=self._on_duplicate)
        return ref

    def transform(
        self,
        transform_id: str,
        *,
        doc: str | None = None,
        source: str | None = None,
        tags: tuple[str, ...] = (),
    ) -> Callable[[Callable[[Any], Any]], Callable[[Any], Any]]:
        """Decorator form of `register`."""

        def decorator(fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
            self.register(transform_id, fn, doc=doc, source=source, tags=tags)
            return fn

        return decorator

    def snapshot(self) -> TransformRegistry:
        with self._lock:
            return TransformRegistry(_by_id=self._entries)

    def freeze(self) -> TransformRegistry:
        with self._lock:
            self._frozen = True
            return TransformRegistry(_by_id=self._entries)

    def rebuild(self, refs: Iterable[TransformRef]) -> TransformRegistry:
        """Replace the whole mapping; existing snapshots are unaffected."""

        refs = list(refs)
        with self._lock:
            self._entries = _merge_refs({}, refs, on_duplicate=self._on_duplicate)
            return TransformRegistry(_by_id=self._entries)
