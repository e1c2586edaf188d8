import os

import pytest

from textchain.foundation.config_io import find_repo_root, load_config


def test_load_config_base_only(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_TEXTCHAIN_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text("a: 1\nb:\n  c: 2\n", encoding="utf-8")

    cfg, meta = load_config(config_dir=str(tmp_path), env_var="TEST_TEXTCHAIN_CONFIG")

    assert cfg == {"a": 1, "b": {"c": 2}}
    assert meta["mode"] == "base"
    assert os.path.basename(meta["paths"][0]) == "config.yaml"


def test_load_config_base_plus_local_overlay(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_TEXTCHAIN_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text(
        "pipeline:\n  order: [lower, trim]\n  on_unresolved: fail_fast\n", encoding="utf-8"
    )
    (tmp_path / "config.local.yaml").write_text("pipeline:\n  order: [upper]\n", encoding="utf-8")

    cfg, meta = load_config(config_dir=str(tmp_path), env_var="TEST_TEXTCHAIN_CONFIG")

    assert cfg == {"pipeline": {"order": ["upper"], "on_unresolved": "fail_fast"}}
    assert meta["mode"] == "base+local"
    assert len(meta["paths"]) == 2


def test_load_config_overlay_type_mismatch_raises(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_TEXTCHAIN_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text("a:\n  b: 1\n", encoding="utf-8")
    (tmp_path / "config.local.yaml").write_text("a: [1, 2]\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"Invalid config overlay merge at a"):
        load_config(config_dir=str(tmp_path), env_var="TEST_TEXTCHAIN_CONFIG")


def test_load_config_invalid_overlay_yaml_raises(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_TEXTCHAIN_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text("a: 1\n", encoding="utf-8")
    (tmp_path / "config.local.yaml").write_text("a: [1, 2\n", encoding="utf-8")

    with pytest.raises(ValueError) as excinfo:
        load_config(config_dir=str(tmp_path), env_var="TEST_TEXTCHAIN_CONFIG")

    assert "config.local.yaml" in str(excinfo.value)


def test_load_config_rejects_non_mapping_payload(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_TEXTCHAIN_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"must contain a YAML mapping"):
        load_config(config_dir=str(tmp_path), env_var="TEST_TEXTCHAIN_CONFIG")


def test_load_config_missing_base_raises(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_TEXTCHAIN_CONFIG", raising=False)

    with pytest.raises(FileNotFoundError, match=r"Missing base config file"):
        load_config(config_dir=str(tmp_path), env_var="TEST_TEXTCHAIN_CONFIG")


def test_load_config_env_override_loads_single_file(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text("a: 1\n", encoding="utf-8")
    (tmp_path / "config.local.yaml").write_text("a: 2\n", encoding="utf-8")
    override = tmp_path / "override.yaml"
    override.write_text("a: 3\n", encoding="utf-8")
    monkeypatch.setenv("TEST_TEXTCHAIN_CONFIG", str(override))

    cfg, meta = load_config(config_dir=str(tmp_path), env_var="TEST_TEXTCHAIN_CONFIG")

    assert cfg == {"a": 3}
    assert meta["mode"] == "env"
    assert meta["paths"] == [os.path.abspath(str(override))]


def test_load_config_explicit_path_wins_over_env(tmp_path, monkeypatch):
    env_file = tmp_path / "env.yaml"
    env_file.write_text("a: 1\n", encoding="utf-8")
    explicit = tmp_path / "explicit.yaml"
    explicit.write_text("a: 2\n", encoding="utf-8")
    monkeypatch.setenv("TEST_TEXTCHAIN_CONFIG", str(env_file))

    cfg, meta = load_config(config_path=str(explicit), env_var="TEST_TEXTCHAIN_CONFIG")

    assert cfg == {"a": 2}
    assert meta["mode"] == "explicit"


def test_find_repo_root_uses_pyproject_marker(tmp_path):
    (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_repo_root(nested) == str(tmp_path.resolve())


def test_repo_ships_default_config(monkeypatch):
    monkeypatch.delenv("TEXTCHAIN_CONFIG", raising=False)
    cfg, meta = load_config(start_dir=os.path.dirname(__file__))

    assert meta["mode"] in ("base", "base+local")
    assert "pipeline" in cfg
