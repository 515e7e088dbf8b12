"""
Tests for the Token Fixer.
"""

import pytest

from cache_baker.core.fixer import Fixer
from cache_baker.core.tokens import TokenStream


@pytest.fixture
def stream():
  # 0:<?php_ 1:echo 2:_ 3:1 4:;
  return TokenStream.from_source("<?php echo 1;")


def test_no_edits_reproduces_source(stream):
  fixer = Fixer(stream)
  assert fixer.get_contents() == "<?php echo 1;"
  assert fixer.fix_count == 0


def test_add_content_after(stream):
  fixer = Fixer(stream)
  fixer.add_content(0, "/* a */")

  assert fixer.get_contents() == "<?php /* a */echo 1;"
  assert fixer.fix_count == 1


def test_add_content_before(stream):
  fixer = Fixer(stream)
  fixer.add_content_before(1, "/* b */")

  assert fixer.get_contents() == "<?php /* b */echo 1;"


def test_insertions_keep_order(stream):
  fixer = Fixer(stream)
  fixer.add_content(4, "A")
  fixer.add_content(4, "B")

  assert fixer.get_contents() == "<?php echo 1;AB"


def test_replace_keeps_surrounding_content(stream):
  fixer = Fixer(stream)
  fixer.add_content(0, "X;")
  fixer.replace_token(0, "")

  assert fixer.get_contents() == "X;echo 1;"
  assert fixer.fix_count == 2


@pytest.mark.parametrize("index", [-1, 5])
def test_out_of_range(stream, index):
  fixer = Fixer(stream)
  with pytest.raises(IndexError):
    fixer.add_content(index, "x")


def test_disabled_fixer_flag(stream):
  assert Fixer(stream, enabled=False).enabled is False
