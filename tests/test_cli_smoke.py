import io
import json

from textchain import cli
from textchain.app import run as app_run


def _write_config(tmp_path, *, order, on_unresolved="fail_fast", extra: str = "") -> str:
    logs_dir = tmp_path / "logs"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "\n".join(
            [
                "pipeline:",
                f"  order: {json.dumps(order)}",
                f"  on_unresolved: {on_unresolved}",
                "logging:",
                "  level: DEBUG",
                f"  log_path: '{logs_dir.as_posix()}'",
                extra,
                "",
            ]
        ),
        encoding="utf-8",
    )
    return str(config_path)


def test_cli_list_transforms_smoke(capsys):
    rc = cli.main(["list-transforms"])
    assert rc == 0

    out = capsys.readouterr().out
    assert "drop_hello" in out
    assert "Lowercase the text." in out


def test_cli_list_transforms_json(capsys):
    rc = cli.main(["list-transforms", "--json"])
    assert rc == 0

    rows = json.loads(capsys.readouterr().out)
    assert {row["transform_id"] for row in rows} >= {"lower", "upper", "trim", "drop_hello"}


def test_cli_run_uses_configured_order(tmp_path, monkeypatch, capsys):
    config_path = _write_config(tmp_path, order=["lower", "drop_hello", "upper", "trim"])
    monkeypatch.setattr(app_run, "generate_run_id", lambda: "unit_test_cli_run")

    rc = cli.main(["run", "--config", config_path, "Hello World", "  hello there "])
    assert rc == 0

    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["WORLD", "THERE"]
    assert "Pipeline: lower -> drop_hello -> upper -> trim" in captured.err

    log_file = tmp_path / "logs" / "unit_test_cli_run_oplog.log"
    assert log_file.exists()
    assert "Completed transform pipeline/03:trim" in log_file.read_text(encoding="utf-8")


def test_cli_run_order_override(tmp_path, capsys):
    config_path = _write_config(tmp_path, order=["upper"])

    rc = cli.main(["run", "--config", config_path, "--order", "lower,trim,drop_hello,upper", "Hello World"])
    assert rc == 0
    assert capsys.readouterr().out == " WORLD\n"


def test_cli_run_fail_fast_exits_with_config_error(tmp_path, capsys):
    config_path = _write_config(tmp_path, order=["lower", "shout"])

    rc = cli.main(["run", "--config", config_path, "Hello"])
    assert rc == app_run.EXIT_CONFIG_ERROR

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Unknown transform id: 'shout' at order[1]" in captured.err


def test_cli_run_skip_unresolved_reports_skipped_ids(tmp_path, capsys):
    config_path = _write_config(tmp_path, order=["shout", "upper", "whisper"])

    rc = cli.main(["run", "--config", config_path, "--on-unresolved", "skip_unresolved", "abc"])
    assert rc == 0

    captured = capsys.readouterr()
    assert captured.out == "ABC\n"
    assert "Skipped unresolved transform ids: shout, whisper (positions: 0, 2)" in captured.err


def test_run_reads_values_from_stdin(tmp_path):
    config_path = _write_config(tmp_path, order=["trim", "upper"])
    out = io.StringIO()

    rc = app_run.main(config_path=config_path, stdin=io.StringIO(" a \nb\n"), stdout=out)
    assert rc == 0
    assert out.getvalue() == "A\nB\n"


def test_run_invalid_config_exits_with_config_error(tmp_path, capsys):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("pipeline:\n  order: [lower]\n", encoding="utf-8")

    rc = app_run.main(["x"], config_path=str(config_path))
    assert rc == app_run.EXIT_CONFIG_ERROR
    assert "pipeline.on_unresolved" in capsys.readouterr().err


def test_run_transform_failure_exits_nonzero(tmp_path, capsys):
    config_path = _write_config(tmp_path, order=["upper"])

    rc = app_run.main([None], config_path=config_path)  # type: ignore[list-item]
    assert rc == app_run.EXIT_TRANSFORM_FAILED
    assert "Pipeline failed on input #0" in capsys.readouterr().err
