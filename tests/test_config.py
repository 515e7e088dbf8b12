"""
Tests for Runtime Configuration Loading.
"""

import pytest
from pydantic import ValidationError

from cache_baker.config import RuntimeConfig, parse_rule_overrides

PYPROJECT = """
[tool.cache_baker]
namespace = 'Acme\\Shop'
strip_first_open_tag = true
extensions = ["php", ".inc"]

[tool.cache_baker.rules]
uniqid = "none"
date_create = 1
"""


@pytest.fixture
def project(tmp_path):
  (tmp_path / "pyproject.toml").write_text(PYPROJECT, encoding="utf-8")
  sub = tmp_path / "src" / "pages"
  sub.mkdir(parents=True)
  return sub


def test_defaults():
  config = RuntimeConfig()

  assert config.namespace is None
  assert config.strip_first_open_tag is False
  assert config.extensions == [".php"]
  assert len(config.build_catalogue()) == 25


def test_load_from_parent_pyproject(project):
  config = RuntimeConfig.load(search_path=project)

  assert config.namespace == "Acme\\Shop"
  assert config.strip_first_open_tag is True
  assert config.rules == {"uniqid": None, "date_create": 1}
  assert config.extensions == [".php", ".inc"]


def test_cli_overrides_toml(project):
  config = RuntimeConfig.load(
    namespace="Other\\Vendor",
    strip_first_open_tag=False,
    rules={"date_create": 2, "hrtime": None},
    search_path=project,
  )

  assert config.namespace == "Other\\Vendor"
  assert config.strip_first_open_tag is False
  assert config.rules == {"uniqid": None, "date_create": 2, "hrtime": None}


def test_load_without_pyproject(tmp_path):
  config = RuntimeConfig.load(search_path=tmp_path)
  assert config.namespace is None
  assert config.rules == {}


def test_build_catalogue_extends_defaults():
  catalogue = RuntimeConfig(rules={"UniqId": "none"}).build_catalogue()

  assert "uniqid" in catalogue
  assert "time" in catalogue


def test_build_catalogue_replaces_defaults():
  config = RuntimeConfig(rules={"uniqid": None}, replace_default_rules=True)
  catalogue = config.build_catalogue()

  assert list(catalogue) == ["uniqid"]


@pytest.mark.parametrize("threshold", [0, "zero", True])
def test_invalid_threshold(threshold):
  with pytest.raises(ValidationError):
    RuntimeConfig(rules={"date": threshold})


def test_parse_rule_overrides():
  rules = parse_rule_overrides(["uniqid=none", "Date_Create = 2", "hrtime="])
  assert rules == {"uniqid": None, "date_create": 2, "hrtime": None}


def test_parse_rule_overrides_empty():
  assert parse_rule_overrides(None) == {}


@pytest.mark.parametrize("item", ["uniqid", "=2", "date=0", "date=x"])
def test_parse_rule_overrides_invalid(item):
  with pytest.raises(ValueError):
    parse_rule_overrides([item])
