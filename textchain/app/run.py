import logging
import os
import sys
import uuid
from datetime import datetime
from typing import Any, Sequence, TextIO

from chainkit import ChainError, Composition, DefaultStepRecorder, UnknownIdentifier, compose
from textchain.foundation.config_io import deep_merge, load_config
from textchain.framework.config import RunConfig
from textchain.transforms.registry import build_transform_registry

EXIT_OK = 0
EXIT_TRANSFORM_FAILED = 1
EXIT_CONFIG_ERROR = 2


def generate_run_id() -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{uuid.uuid4().hex[:8]}"


def setup_operational_logger(
    run_id: str, *, level: str = "INFO", log_dir: str | None = None
) -> tuple[logging.Logger, str | None]:
    """
    Configure a logger for one run.
    Logs go to stderr and, when `log_dir` is set, to a UTF-8 file under it.
    """

    logger = logging.getLogger(f"textchain.{run_id}")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    log_file: str | None = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"{run_id}_oplog.log")
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    logger.debug("Operational logging initialized for run %s", run_id)
    if log_file:
        logger.debug("Operational log file: %s", log_file)

    return logger, log_file


def _close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _apply_overrides(
    cfg_dict: dict[str, Any],
    *,
    order: Sequence[str] | None,
    on_unresolved: str | None,
) -> dict[str, Any]:
    overlay: dict[str, Any] = {}
    if order is not None:
        overlay["order"] = list(order)
    if on_unresolved is not None:
        overlay["on_unresolved"] = on_unresolved
    if not overlay:
        return cfg_dict
    if not isinstance(cfg_dict.get("pipeline"), dict):
        cfg_dict = {**cfg_dict, "pipeline": {}}
    return deep_merge(cfg_dict, {"pipeline": overlay})


def report_composition(composition: Composition, logger: logging.Logger) -> None:
    if composition.skipped:
        logger.warning(
            "Skipped unresolved transform ids: %s (positions: %s)",
            ", ".join(composition.skipped),
            ", ".join(str(pos) for pos in composition.skipped_positions),
        )
    ids = composition.pipeline.transform_ids
    logger.info("Pipeline: %s", " -> ".join(ids) if ids else "<identity>")


def main(
    values: Sequence[str] | None = None,
    *,
    config_path: str | None = None,
    order: Sequence[str] | None = None,
    on_unresolved: str | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    try:
        cfg_dict, cfg_meta = load_config(config_path=config_path)
        cfg_dict = _apply_overrides(cfg_dict, order=order, on_unresolved=on_unresolved)
        cfg, cfg_warnings = RunConfig.from_dict(cfg_dict)
    except (OSError, ValueError) as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    run_id = generate_run_id()
    logger, _log_file = setup_operational_logger(run_id, level=cfg.log_level, log_dir=cfg.log_dir)
    try:
        logger.debug("Loaded config (mode=%s): %s", cfg_meta.get("mode"), ", ".join(cfg_meta.get("paths", [])))
        for warning in cfg_warnings:
            logger.warning("Config warning: %s", warning)

        try:
            registry = build_transform_registry(cfg.transforms_cfg, on_duplicate=cfg.on_duplicate)
            composition = compose(cfg.pipeline_order, registry, policy=cfg.on_unresolved)
        except UnknownIdentifier as exc:
            logger.error("Pipeline composition failed: %s", exc)
            return EXIT_CONFIG_ERROR
        except (ChainError, TypeError, ValueError) as exc:
            logger.error("Transform registry setup failed: %s", exc)
            return EXIT_CONFIG_ERROR

        report_composition(composition, logger)

        if values is None:
            values = [line.rstrip("\r\n") for line in stdin]

        recorder = DefaultStepRecorder(logger)
        for idx, value in enumerate(values):
            try:
                result = composition.pipeline.run(value, recorder=recorder)
            except Exception:
                logger.exception("Pipeline failed on input #%d", idx)
                return EXIT_TRANSFORM_FAILED
            print(result, file=stdout)

        logger.info("Processed %d input(s)", len(values))
        return EXIT_OK
    finally:
        _close_logger(logger)
