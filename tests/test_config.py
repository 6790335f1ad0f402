import pytest
import yaml  # type: ignore[import]

from tablegraph import Config, ConfigurationError


def test_defaults():
    cfg = Config()
    assert cfg.section("sample") == {
        "maxsize": 1000,
        "ttl": 86400,
        "workers": 4,
        "single_flight": True,
    }
    assert cfg.section("unknown") == {}


def test_user_values_merge_over_defaults():
    cfg = Config({"sample": {"ttl": 60}})
    sample = cfg.section("sample")
    assert sample["ttl"] == 60
    assert sample["maxsize"] == 1000


def test_config_from_yaml(tmp_path):
    data = {"hours": 2, "sample": {"ttl": "${hours}", "workers": 8}}
    path = tmp_path / "conf.yaml"
    path.write_text(yaml.safe_dump(data))
    cfg = Config(path)
    assert cfg.section("sample")["ttl"] == 2
    assert cfg.section("sample")["workers"] == 8
    assert cfg.hours == 2


def test_missing_yaml_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="Failed to load config"):
        Config(tmp_path / "missing.yaml")


def test_presets_apply_overrides():
    cfg = Config(
        {
            "baseline": {"ttl": 5},
            "sample": {
                "maxsize": 50,
                "_use_": "small",
                "_presets_": {
                    "small": {"maxsize": 10, "ttl": "${baseline.ttl}"},
                    "large": {"maxsize": 100000},
                },
            },
        }
    )
    sample = cfg.section("sample")
    assert sample["maxsize"] == 10
    assert sample["ttl"] == 5
    assert "_presets_" not in sample

    cfg.sample["_use_"] = "large"
    assert cfg.section("sample")["maxsize"] == 100000


def test_presets_without_selection_use_base():
    cfg = Config({"sample": {"maxsize": 50, "_presets_": {"small": {"maxsize": 10}}}})
    assert cfg.section("sample")["maxsize"] == 50


def test_presets_missing_entry_raises():
    cfg = Config({"sample": {"_use_": "bar", "_presets_": {"foo": {"maxsize": 1}}}})
    with pytest.raises(ConfigurationError, match="Unknown preset 'bar'"):
        cfg.section("sample")


@pytest.mark.parametrize("key,value", [("maxsize", 0), ("ttl", -1), ("workers", "many")])
def test_validate_rejects_bad_values(key, value):
    with pytest.raises(ConfigurationError, match=f"sample.{key}"):
        Config({"sample": {key: value}}).validate()


def test_attribute_access():
    cfg = Config({"name": "catalog"})
    assert cfg.name == "catalog"
    cfg.name = "other"
    assert cfg.to_dict()["name"] == "other"
    with pytest.raises(AttributeError):
        cfg.missing
