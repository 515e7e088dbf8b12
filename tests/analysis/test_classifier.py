"""
Tests for Call Classification.

Verifies the decision order:
1. Unknown names are clear.
2. Always-dynamic names are dynamic regardless of arguments.
3. Unpacking hides the count of threshold functions.
4. Threshold functions are clear only with enough arguments.
"""

import pytest

from cache_baker.analysis.catalogue import DeterminismCatalogue
from cache_baker.analysis.classifier import Verdict, VerdictKind, classify

CATALOGUE = DeterminismCatalogue.default()


@pytest.mark.parametrize("name", ["time", "rand", "mt_rand", "random_bytes", "curl_exec"])
@pytest.mark.parametrize("args", [0, 1, 3])
def test_always_dynamic_ignores_arguments(name, args):
  verdict = classify(name, args, False, CATALOGUE)
  assert verdict.kind == VerdictKind.ALWAYS_DYNAMIC
  assert verdict.is_dynamic


def test_always_dynamic_with_unpack():
  verdict = classify("random_int", 1, True, CATALOGUE)
  assert verdict.kind == VerdictKind.ALWAYS_DYNAMIC


def test_unknown_function_is_clear():
  verdict = classify("strlen", 0, False, CATALOGUE)
  assert verdict == Verdict(VerdictKind.CLEAR, "strlen")
  assert not verdict.is_dynamic


def test_threshold_met():
  assert classify("date", 2, False, CATALOGUE).kind == VerdictKind.CLEAR
  assert classify("mktime", 7, False, CATALOGUE).kind == VerdictKind.CLEAR


@pytest.mark.parametrize("name, args, required", [("date", 1, 2), ("date", 0, 2), ("gmmktime", 5, 6), ("getdate", 0, 1)])
def test_threshold_not_met(name, args, required):
  verdict = classify(name, args, False, CATALOGUE)

  assert verdict.kind == VerdictKind.INSUFFICIENT_ARGUMENTS
  assert verdict.actual == args
  assert verdict.required == required


def test_unpack_makes_count_unknown():
  # Even a literal count above the threshold can't be trusted with a spread.
  verdict = classify("gmmktime", 7, True, CATALOGUE)

  assert verdict.kind == VerdictKind.UNKNOWN_ARGUMENT_COUNT
  assert verdict.required == 6
  assert verdict.actual is None


def test_name_case_is_preserved():
  verdict = classify("DATE", 1, False, CATALOGUE)
  assert verdict.kind == VerdictKind.INSUFFICIENT_ARGUMENTS
  assert verdict.name == "DATE"


def test_custom_catalogue():
  catalogue = DeterminismCatalogue.from_mapping({"uniqid": None})

  assert classify("uniqid", 0, False, catalogue).kind == VerdictKind.ALWAYS_DYNAMIC
  assert classify("time", 0, False, catalogue).kind == VerdictKind.CLEAR


def test_already_marked_is_not_dynamic():
  assert not Verdict(VerdictKind.ALREADY_MARKED, "Cache").is_dynamic
