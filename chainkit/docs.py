"""`chainkit` invariants and boundaries.

This module exists to make repository-wide refactors and boundary tests explicit.

Generic invariants:

1) `chainkit` must not import `textchain.*`.
2) `chainkit` provides the registry (construct-then-freeze), the composer and the
   composed `Pipeline`. It never logs; step logging only happens through a
   `StepRecorder` the caller passes in.
3) `chainkit` does not define project conventions like:
   - where the order list is loaded from
   - which transformations exist or what they do
   - what to do about skipped ids (fail the request, alert, fall back)

Transformations are assumed pure. This is a documented precondition for the
concurrency guarantees of `Pipeline.apply`, not something the kernel checks.
"""
