"""
Tests for the `check` command handler.
"""

import json

import pytest

from cache_baker.cli.handlers import collect_sources, handle_check


@pytest.fixture
def sources(tmp_path):
  root = tmp_path / "site"
  (root / "pages").mkdir(parents=True)
  (root / "clean.php").write_text("<?php\necho date('Y', 0);\n", encoding="utf-8")
  (root / "pages" / "clock.php").write_text("<?php\necho time();\necho date('Y');\n", encoding="utf-8")
  (root / "notes.txt").write_text("time()", encoding="utf-8")
  return root


def test_collect_sources(sources):
  found = collect_sources(sources, [".php"])
  assert [p.name for p in found] == ["clean.php", "clock.php"]


def test_collect_single_file(sources):
  target = sources / "clean.php"
  assert collect_sources(target, [".php"]) == [target]


def test_check_reports_findings(sources, capsys):
  assert handle_check(sources, {}) == 1

  out = capsys.readouterr().out
  assert "Dynamic Calls" in out
  assert "Findings:" in out


def test_check_clean_file(sources):
  assert handle_check(sources / "clean.php", {}) == 0


def test_check_json(sources, capsys):
  assert handle_check(sources, {}, json_mode=True) == 1

  findings = json.loads(capsys.readouterr().out)

  assert [f["code"] for f in findings] == [
    "DynamicFunctions.Found",
    "DynamicFunctions.FoundPossibleStatic",
  ]
  assert findings[0]["file"].endswith("clock.php")
  assert (findings[0]["line"], findings[0]["column"]) == (2, 6)


def test_check_cli_rules(sources, capsys):
  (sources / "clean.php").write_text("<?php\necho uniqid();\n", encoding="utf-8")

  handle_check(sources / "clean.php", {"uniqid": None}, json_mode=True)

  findings = json.loads(capsys.readouterr().out)
  assert len(findings) == 1
  assert "uniqid()" in findings[0]["message"]


def test_check_lexer_failure(sources, capsys):
  (sources / "broken.php").write_text('<?php\n$a = "open;\n', encoding="utf-8")

  assert handle_check(sources / "broken.php", {}) == 1
  assert "Failed to check broken.php" in capsys.readouterr().out


def test_check_missing_path(tmp_path):
  assert handle_check(tmp_path / "missing", {}) == 1
