import json

import pytest

from amazon_ecs.config import REQUEST_DEFAULTS, OperationOptions, SearchConfig, migrate_config
from amazon_ecs.version import CONFIG_SCHEMA_VERSION


def test_request_defaults():
    assert REQUEST_DEFAULTS.endpoint_host == "ecs.amazonaws."
    assert REQUEST_DEFAULTS.uri_path == "/onca/xml"
    assert REQUEST_DEFAULTS.hash_algorithm == "sha256"
    assert REQUEST_DEFAULTS.http_method == "GET"


def test_operation_options_are_immutable():
    options = OperationOptions()
    with pytest.raises(Exception):
        options.operation = "ItemLookup"
    changed = options.with_overrides(operation="ItemLookup", api_version=None)
    assert changed.operation == "ItemLookup"
    assert changed.api_version == "2009-03-31"
    assert options.operation == "ItemSearch"


def test_from_env(monkeypatch):
    monkeypatch.setenv("AMAZON_ECS_PUBLIC_KEY", "PK")
    monkeypatch.setenv("AMAZON_ECS_PRIVATE_KEY", "SK")
    monkeypatch.setenv("AMAZON_ECS_ASSOCIATE_TAG", "TAG")
    monkeypatch.setenv("AMAZON_ECS_REGION", "co.uk")
    monkeypatch.setenv("AMAZON_ECS_RESPONSE_GROUP", "Medium")
    cfg = SearchConfig.from_env()
    assert (cfg.public_key, cfg.private_key, cfg.associate_tag, cfg.region) == ("PK", "SK", "TAG", "co.uk")
    assert cfg.operation_options() == OperationOptions(response_group="Medium")
    cfg.validate()


def test_from_file_fills_schema_version(tmp_path):
    path = tmp_path / "ecs.json"
    path.write_text(json.dumps({"public_key": "PK", "private_key": "SK", "associate_tag": "TAG", "region": "de"}))
    cfg = SearchConfig.from_file(path)
    assert cfg.region == "de"
    assert cfg.schema_version == CONFIG_SCHEMA_VERSION
    assert cfg.to_dict()["public_key"] == "PK"


def test_migrate_config_does_not_mutate_input():
    raw = {"public_key": "PK"}
    migrated = migrate_config(raw)
    assert "schema_version" not in raw
    assert migrated["schema_version"] == CONFIG_SCHEMA_VERSION


@pytest.mark.parametrize("missing", ["public_key", "private_key", "associate_tag", "region"])
def test_validate_rejects_empty_fields(missing):
    cfg = SearchConfig(public_key="PK", private_key="SK", associate_tag="TAG")
    setattr(cfg, missing, "")
    with pytest.raises(ValueError):
        cfg.validate()


def test_default_user_agent_carries_release():
    from amazon_ecs.version import __version__

    assert SearchConfig().user_agent == f"amazon_ecs/{__version__}"
