import pytest

from textchain.framework.config import RunConfig, parse_bool


def _base_cfg_dict() -> dict:
    return {
        "pipeline": {"order": ["lower", "trim"], "on_unresolved": "fail_fast"},
        "registry": {"on_duplicate": "reject"},
        "transforms": {"drop_words": {"words": ["hello"]}},
        "logging": {"level": "info", "log_path": None},
    }


def test_run_config_parses_base_dict():
    cfg, warnings = RunConfig.from_dict(_base_cfg_dict())

    assert cfg.pipeline_order == ("lower", "trim")
    assert cfg.on_unresolved == "fail_fast"
    assert cfg.on_duplicate == "reject"
    assert cfg.transforms_cfg == {"drop_words": {"words": ["hello"]}}
    assert cfg.log_level == "INFO"
    assert cfg.log_dir is None
    assert warnings == []


def test_run_config_requires_explicit_unresolved_policy():
    cfg_dict = _base_cfg_dict()
    del cfg_dict["pipeline"]["on_unresolved"]

    with pytest.raises(ValueError, match=r"Missing required config key: pipeline\.on_unresolved"):
        RunConfig.from_dict(cfg_dict)


def test_run_config_requires_order():
    cfg_dict = _base_cfg_dict()
    del cfg_dict["pipeline"]["order"]

    with pytest.raises(ValueError, match=r"Missing required config key: pipeline\.order"):
        RunConfig.from_dict(cfg_dict)


@pytest.mark.parametrize(
    ("section", "key", "value", "pattern"),
    [
        ("pipeline", "on_unresolved", "ignore", r"pipeline\.on_unresolved"),
        ("registry", "on_duplicate", "merge", r"registry\.on_duplicate"),
        ("logging", "level", "chatty", r"logging\.level"),
        ("pipeline", "order", "lower", r"pipeline\.order"),
        ("pipeline", "order", ["lower", ""], r"pipeline\.order\[1\]"),
    ],
)
def test_run_config_rejects_invalid_values(section, key, value, pattern):
    cfg_dict = _base_cfg_dict()
    cfg_dict[section][key] = value

    with pytest.raises(ValueError, match=pattern):
        RunConfig.from_dict(cfg_dict)


def test_run_config_empty_order_warns():
    cfg_dict = _base_cfg_dict()
    cfg_dict["pipeline"]["order"] = []

    cfg, warnings = RunConfig.from_dict(cfg_dict)
    assert cfg.pipeline_order == ()
    assert any("pipeline.order is empty" in w for w in warnings)


def test_run_config_overwrite_policy_warns():
    cfg_dict = _base_cfg_dict()
    cfg_dict["registry"]["on_duplicate"] = "overwrite"

    cfg, warnings = RunConfig.from_dict(cfg_dict)
    assert cfg.on_duplicate == "overwrite"
    assert any("registry.on_duplicate=overwrite" in w for w in warnings)


def test_unknown_config_keys_warn_by_default():
    cfg_dict = _base_cfg_dict()
    cfg_dict["pipeline"]["unknown_pipeline_key"] = 123
    cfg_dict["extra_section"] = {"x": 1}
    cfg_dict["transforms"]["anything"] = {"goes": True}

    _cfg, warnings = RunConfig.from_dict(cfg_dict)
    assert any("Unknown config key: pipeline.unknown_pipeline_key" in w for w in warnings)
    assert any("Unknown config key: extra_section" in w for w in warnings)
    assert not any("transforms.anything" in w for w in warnings)


def test_unknown_config_keys_strict_mode_raises():
    cfg_dict = _base_cfg_dict()
    cfg_dict["strict"] = "yes"
    cfg_dict["pipeline"]["unknown_pipeline_key"] = 123

    with pytest.raises(ValueError, match=r"Unknown config keys: pipeline\.unknown_pipeline_key"):
        RunConfig.from_dict(cfg_dict)


def test_run_config_resolves_relative_log_path_against_repo_root(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    cfg_dict = _base_cfg_dict()
    cfg_dict["logging"]["log_path"] = "logs"

    cfg, _warnings = RunConfig.from_dict(cfg_dict)
    assert cfg.log_dir == str((tmp_path / "logs").resolve())


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), (0, False), (" Yes ", True), ("false", False)],
)
def test_parse_bool_accepts_common_spellings(value, expected):
    assert parse_bool(value, "x") is expected


def test_parse_bool_rejects_ambiguous_values():
    with pytest.raises(ValueError, match=r"Invalid boolean for strict"):
        parse_bool("maybe", "strict")
