"""Error taxonomy for registry construction and pipeline composition."""

from __future__ import annotations


class ChainError(ValueError):
    """Base class for `chainkit` errors."""


class DuplicateIdentifier(ChainError):
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Duplicate transform id: {identifier}")


class UnknownIdentifier(ChainError):
    """An identifier could not be resolved against a registry snapshot.

    `position` is the index in the order list when raised by the composer and
    None when raised by a direct registry lookup.
    """

    def __init__(
        self,
        identifier: str,
        position: int | None = None,
        *,
        available: tuple[str, ...] = (),
        suggestions: tuple[str, ...] = (),
    ) -> None:
        self.identifier = identifier
        self.position = position
        self.available = tuple(available)
        self.suggestions = tuple(suggestions)

        where = f" at order[{position}]" if position is not None else ""
        message = f"Unknown transform id: {identifier!r}{where}"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)})"
        message += f" (available: {', '.join(self.available) or '<none>'})"
        super().__init__(message)


class RegistryFrozenError(ChainError):
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(
            f"Cannot register transform id {identifier!r}: registry is frozen (use rebuild())"
        )
