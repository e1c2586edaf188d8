from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from chainkit import ALLOWED_DUPLICATE_POLICIES, ALLOWED_UNRESOLVED_POLICIES, DuplicatePolicy, UnresolvedPolicy
from textchain.foundation.config_io import find_repo_root

ALLOWED_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_bool(value: Any, path: str) -> bool:
    """
    Strict boolean parsing to avoid bool('false') footguns.

    Accepts:
      - True/False
      - 0/1 (ints)
      - strings: true/false/1/0/yes/no (case-insensitive, surrounding whitespace ignored)

    Raises:
      ValueError for anything else, with the provided config key path.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"Invalid boolean for {path}: {value!r}")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes"}:
            return True
        if normalized in {"false", "0", "no"}:
            return False
        raise ValueError(f"Invalid boolean for {path}: {value!r}")

    raise ValueError(f"Invalid boolean for {path}: {value!r}")


def parse_choice(value: Any, path: str, choices: tuple[str, ...]) -> str:
    if not isinstance(value, str) or value.strip() not in choices:
        raise ValueError(
            f"Invalid config value for {path}: must be one of: {', '.join(choices)} (got {value!r})"
        )
    return value.strip()


def parse_id_list(value: Any, path: str) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Invalid config type for {path}: expected a list of transform ids")
    items: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"Invalid config value for {path}[{idx}]: must be a non-empty string")
        items.append(item.strip())
    return tuple(items)


@dataclass(frozen=True)
class RunConfig:
    pipeline_order: tuple[str, ...]
    on_unresolved: UnresolvedPolicy
    on_duplicate: DuplicatePolicy = "reject"
    transforms_cfg: Mapping[str, Any] = field(default_factory=dict)
    log_level: str = "INFO"
    log_dir: str | None = None
    strict: bool = False

    @staticmethod
    def from_dict(cfg: Mapping[str, Any]) -> tuple["RunConfig", list[str]]:
        """
        Parse and validate configuration, returning (RunConfig, warnings).

        Raises:
            ValueError: if required keys are missing or invalid.
        """

        if not isinstance(cfg, Mapping):
            raise ValueError("Config must be a mapping")

        warnings: list[str] = []

        strict = False
        if "strict" in cfg:
            strict = parse_bool(cfg.get("strict"), "strict")

        ANY: object = object()
        schema: Mapping[str, Any] = {
            "strict": None,
            "pipeline": {"order": None, "on_unresolved": None},
            "registry": {"on_duplicate": None},
            "transforms": ANY,
            "logging": {"level": None, "log_path": None},
        }

        def collect_unknown_keys(mapping: Any, subschema: Mapping[str, Any], *, prefix: str) -> list[str]:
            if not isinstance(mapping, Mapping):
                return []
            unknown: list[str] = []
            for key, value in mapping.items():
                if not isinstance(key, str):
                    continue
                key_path = f"{prefix}.{key}" if prefix else key
                if key not in subschema:
                    unknown.append(key_path)
                    continue
                child = subschema.get(key)
                if isinstance(child, Mapping):
                    unknown.extend(collect_unknown_keys(value, child, prefix=key_path))
            return unknown

        unknown_keys = collect_unknown_keys(cfg, schema, prefix="")
        if unknown_keys:
            if strict:
                raise ValueError("Unknown config keys: " + ", ".join(unknown_keys))
            warnings.extend(f"Unknown config key: {key}" for key in unknown_keys)

        def section(name: str) -> Mapping[str, Any]:
            raw = cfg.get(name)
            if raw is None:
                return {}
            if not isinstance(raw, Mapping):
                raise ValueError(f"Invalid config type for {name}: expected a mapping")
            return raw

        pipeline_cfg = section("pipeline")
        if "order" not in pipeline_cfg:
            raise ValueError("Missing required config key: pipeline.order")
        order = parse_id_list(pipeline_cfg.get("order"), "pipeline.order")
        if not order:
            warnings.append("pipeline.order is empty; the pipeline will return inputs unchanged")

        if "on_unresolved" not in pipeline_cfg:
            raise ValueError(
                "Missing required config key: pipeline.on_unresolved "
                f"(one of: {', '.join(ALLOWED_UNRESOLVED_POLICIES)})"
            )
        on_unresolved = parse_choice(
            pipeline_cfg.get("on_unresolved"), "pipeline.on_unresolved", ALLOWED_UNRESOLVED_POLICIES
        )

        registry_cfg = section("registry")
        on_duplicate = parse_choice(
            registry_cfg.get("on_duplicate", "reject"),
            "registry.on_duplicate",
            ALLOWED_DUPLICATE_POLICIES,
        )
        if on_duplicate == "overwrite":
            warnings.append("registry.on_duplicate=overwrite: duplicate transform ids replace silently")

        transforms_cfg = dict(section("transforms"))

        logging_cfg = section("logging")
        log_level = parse_choice(
            str(logging_cfg.get("level", "INFO")).upper(), "logging.level", ALLOWED_LOG_LEVELS
        )

        log_dir: str | None = None
        raw_log_path = logging_cfg.get("log_path")
        if raw_log_path is not None:
            if not isinstance(raw_log_path, str) or not raw_log_path.strip():
                raise ValueError("Invalid config value for logging.log_path: must be a non-empty string or null")
            expanded = os.path.expandvars(os.path.expanduser(raw_log_path.strip()))
            if not os.path.isabs(expanded):
                expanded = os.path.join(find_repo_root(), expanded)
            log_dir = os.path.abspath(expanded)

        return (
            RunConfig(
                pipeline_order=order,
                on_unresolved=on_unresolved,  # type: ignore[arg-type]
                on_duplicate=on_duplicate,  # type: ignore[arg-type]
                transforms_cfg=transforms_cfg,
                log_level=log_level,
                log_dir=log_dir,
                strict=strict,
            ),
            warnings,
        )
