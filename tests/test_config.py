"""
Runtime config tests: scalar coercion, config layering, Params overrides.

Run with: pytest tests/test_config.py -v
"""

import json

import pytest

from unleash_agent import config
from unleash_agent.agent.params import Params


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    monkeypatch.delenv(config.ENV_VAR, raising=False)


@pytest.mark.parametrize(
    "raw, expected",
    [("true", True), ("False", False), ("3", 3), ("0.85", 0.85), ("1e2", 100.0), (" name ", "name")],
)
def test_coerce_scalar(raw, expected):
    assert config.coerce_scalar(raw) == expected


def test_sources_merge_in_order(monkeypatch, tmp_path):
    monkeypatch.setenv(config.ENV_VAR, json.dumps({"EXPLOSION_COST": 10, "BLUFF_INTERVAL": 3}))
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"BLUFF_INTERVAL": 9}), encoding="utf-8")

    cfg = config.load_config(str(path), json.dumps({"EXPLOSION_COST": 20, "DIG_CANDIDATES": 4}))

    assert cfg == {"EXPLOSION_COST": 20, "BLUFF_INTERVAL": 9, "DIG_CANDIDATES": 4}


def test_base_config_layering(tmp_path):
    (tmp_path / "base.json").write_text(json.dumps({"DISCOUNT_RATE": 0.8, "BLUFF_ENABLED": False}), encoding="utf-8")
    child = tmp_path / "child.json"
    child.write_text(json.dumps({"BASE_CONFIG": "base.json", "DISCOUNT_RATE": 0.95}), encoding="utf-8")

    cfg = config.load_config(str(child), None)

    assert cfg == {"DISCOUNT_RATE": 0.95, "BLUFF_ENABLED": False}


def test_missing_and_invalid_configs_exit(tmp_path, monkeypatch):
    with pytest.raises(SystemExit):
        config.load_config(str(tmp_path / "nope.json"), None)
    with pytest.raises(SystemExit):
        config.load_config(None, "{not json")

    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SystemExit):
        config.load_config(str(listing), None)

    orphan = tmp_path / "orphan.json"
    orphan.write_text(json.dumps({"BASE_CONFIG": "missing.json"}), encoding="utf-8")
    with pytest.raises(SystemExit):
        config.load_config(str(orphan), None)

    monkeypatch.setenv(config.ENV_VAR, "oops")
    with pytest.raises(SystemExit):
        config.load_config(None, None)


def test_set_items():
    cfg = config.apply_set_items({}, ["EXPLOSION_COST=50", "BAIT_ENABLED=false"])
    assert cfg == {"EXPLOSION_COST": 50, "BAIT_ENABLED": False}

    with pytest.raises(SystemExit):
        config.apply_set_items({}, ["EXPLOSION_COST"])


def test_apply_config_only_touches_known_uppercase_keys():
    applied = config.apply_config({"EXPLOSION_COST": 42, "lowercase": 1, "NOT_A_PARAM": 2})

    assert applied == ["EXPLOSION_COST"]
    assert Params.EXPLOSION_COST == 42
    assert not hasattr(Params, "NOT_A_PARAM")


def test_invalid_params_exit():
    with pytest.raises(SystemExit):
        config.apply_config({"DISCOUNT_RATE": 1.5})
    with pytest.raises(SystemExit):
        config.apply_config({"BLUFF_INTERVAL": 0})


def test_params_validate_rejects_negative_weights():
    Params.SQUIRREL_WEIGHT = -1.0
    with pytest.raises(ValueError):
        Params.validate()


def test_absolute_base_config_and_non_object_inline_json(tmp_path):
    base = tmp_path / "shared" / "base.json"
    base.parent.mkdir()
    base.write_text(json.dumps({"EXPLOSION_COST": 5, "BLUFF_INTERVAL": 2}), encoding="utf-8")
    child = tmp_path / "child.json"
    child.write_text(json.dumps({"BASE_CONFIG": str(base), "BLUFF_INTERVAL": 4}), encoding="utf-8")

    assert config.load_config(str(child), None) == {"EXPLOSION_COST": 5, "BLUFF_INTERVAL": 4}

    with pytest.raises(SystemExit):
        config.load_config(None, "[1, 2]")
