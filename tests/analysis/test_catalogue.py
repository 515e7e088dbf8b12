"""
Tests for the Determinism Catalogue.
"""

import dataclasses

import pytest

from cache_baker.analysis.catalogue import DEFAULT_RULES, DeterminismCatalogue, DeterminismRule


def test_default_catalogue_contents():
  catalogue = DeterminismCatalogue.default()

  assert len(catalogue) == 25
  assert catalogue.get("time").always_dynamic
  assert catalogue.get("date").threshold == 2
  assert catalogue.get("mktime").threshold == 6
  assert catalogue.get("getdate").threshold == 1
  assert set(catalogue) == set(DEFAULT_RULES)


def test_default_is_shared_instance():
  assert DeterminismCatalogue.default() is DeterminismCatalogue.default()


def test_lookup_ignores_case():
  catalogue = DeterminismCatalogue.default()

  assert "TIME" in catalogue
  assert "Mt_Rand" in catalogue
  assert catalogue.get("DaTe").threshold == 2
  assert "strlen" not in catalogue
  assert catalogue.get("strlen") is None


def test_extended_returns_new_catalogue():
  base = DeterminismCatalogue.default()
  extended = base.extended({"Uniqid": None, "date": 3})

  assert "uniqid" in extended
  assert extended.get("date").threshold == 3
  # Original untouched
  assert "uniqid" not in base
  assert base.get("date").threshold == 2
  assert len(extended) == len(base) + 1


def test_from_mapping_replaces_defaults():
  catalogue = DeterminismCatalogue.from_mapping({"hrtime": None})

  assert list(catalogue) == ["hrtime"]
  assert "time" not in catalogue


def test_empty_catalogue():
  catalogue = DeterminismCatalogue({})
  assert len(catalogue) == 0
  assert "time" not in catalogue


@pytest.mark.parametrize("threshold", [0, -1])
def test_invalid_threshold_rejected(threshold):
  with pytest.raises(ValueError, match="at least 1"):
    DeterminismCatalogue({"date": threshold})


def test_empty_name_rejected():
  with pytest.raises(ValueError):
    DeterminismRule("")


def test_rules_are_frozen():
  rule = DeterminismCatalogue.default().get("date")
  with pytest.raises(dataclasses.FrozenInstanceError):
    rule.threshold = 1
