"""
Tests for Structural Argument Counting.

Verifies:
1. Top-level commas are counted; nested groups are skipped whole.
2. Argument unpacking is flagged rather than counted as known.
3. First-class callable syntax is recognised.
4. Unbalanced groups surface as MalformedScopeBoundaryError.
"""

import pytest

from cache_baker.analysis.arguments import ArgumentCount, count_arguments, is_callable_reference
from cache_baker.core.tokens import TokenStream, TokenType
from cache_baker.errors import MalformedScopeBoundaryError


def _call_bounds(code: str):
  stream = TokenStream.from_source(code)
  open_index = stream.find_next([TokenType.OPEN_PARENTHESIS], 0)
  return stream, open_index, stream.partner(open_index)


def count(args: str) -> ArgumentCount:
  stream, open_index, close_index = _call_bounds(f"<?php f({args});")
  return count_arguments(stream, open_index, close_index)


@pytest.mark.parametrize(
  "args, expected",
  [
    ("", 0),
    ("  /* nothing */ ", 0),
    ("'Y'", 1),
    ("'Y', $ts", 2),
    ("[1, 2, 3], $x", 2),
    ("g(1, 2), h(3)", 2),
    ("['a' => [1, 2]], ...[]", 2),
    ("function ($a, $b) { return [$a, $b]; }, 1", 2),
    ("fn($x) => $x * 2, 3", 2),
    ("$a, ", 1),
    ("name: 'x', other: 2", 2),
  ],
)
def test_count_top_level_arguments(args, expected):
  assert count(args).count == expected


def test_unpack_is_flagged():
  result = count("...$args")
  assert result == ArgumentCount(1, True)


def test_unpack_after_positional_arguments():
  result = count("1, 2, ...$rest")
  assert result.count == 3
  assert result.has_unpack


def test_nested_unpack_is_not_top_level():
  result = count("g(...$x)")
  assert result == ArgumentCount(1, False)


def test_unbalanced_nested_group_raises():
  stream, open_index, close_index = _call_bounds("<?php f([1, 2);")

  with pytest.raises(MalformedScopeBoundaryError):
    count_arguments(stream, open_index, close_index)


def test_callable_reference():
  stream, open_index, close_index = _call_bounds("<?php $f = strlen( ... );")
  assert is_callable_reference(stream, open_index, close_index)


@pytest.mark.parametrize("code", ["<?php f(...$a);", "<?php f();", "<?php f(1);"])
def test_not_callable_reference(code):
  stream, open_index, close_index = _call_bounds(code)
  assert not is_callable_reference(stream, open_index, close_index)
