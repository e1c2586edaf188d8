"""Project-specific framework utilities.

- `textchain.framework.config`: run configuration parsing and validation

For reusable, project-agnostic composition primitives, use `chainkit`.
"""
