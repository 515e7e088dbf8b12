"""
Structural Argument Counting.

Counts the top-level arguments of a call without parsing them. Nested groups
(array literals, inner calls, closure bodies, attributes) are skipped as a
whole using the stream's paired-delimiter index, so commas inside them never
count.

Argument unpacking (``f(...$args)``) makes the real count unknowable. It is
reported separately through `ArgumentCount.has_unpack` rather than folded
into the count.
"""

from dataclasses import dataclass

from cache_baker.core.tokens import EMPTY_TOKENS, OPENERS, TokenStream, TokenType


@dataclass(frozen=True)
class ArgumentCount:
  """
  Attributes:
      count: Number of arguments written at the call site.
      has_unpack: True if a top-level `...` spread was seen.
  """

  count: int
  has_unpack: bool = False


def count_arguments(stream: TokenStream, open_index: int, close_index: int) -> ArgumentCount:
  """
  Counts the arguments between a call's parentheses.

  A trailing comma (``f($a, )``) does not introduce another argument.

  Args:
      stream: The token stream.
      open_index: Index of the `(` opening the argument list.
      close_index: Index of the matching `)`.

  Returns:
      ArgumentCount: The structural count and unpack flag.

  Raises:
      MalformedScopeBoundaryError: If a nested group is never closed.
  """
  count = 0
  has_unpack = False
  expecting_argument = True

  i = open_index + 1
  while i < close_index:
    token = stream[i]

    if token.kind in EMPTY_TOKENS:
      i += 1
      continue

    if token.kind == TokenType.COMMA:
      expecting_argument = True
      i += 1
      continue

    if expecting_argument:
      count += 1
      expecting_argument = False

    if token.kind == TokenType.ELLIPSIS:
      has_unpack = True
    elif token.kind in OPENERS:
      i = stream.partner(i)

    i += 1

  return ArgumentCount(count, has_unpack)


def is_callable_reference(stream: TokenStream, open_index: int, close_index: int) -> bool:
  """
  Detects first-class callable syntax (``strlen(...)``), which creates a
  Closure instead of calling the function.
  """
  first = stream.next_significant(open_index, close_index - 1)
  if first is None or stream[first].kind != TokenType.ELLIPSIS:
    return False
  return stream.next_significant(first, close_index - 1) is None
