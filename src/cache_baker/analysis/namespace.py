"""
Namespace Resolution for Marker Calls.

The marker call is qualified with the first two segments of the unit's
namespace (``Vendor\\Package``). This module derives that prefix either from
a value supplied by the caller or from the unit's own ``namespace``
declaration.
"""

from typing import List

from cache_baker.core.tokens import TokenStream, TokenType
from cache_baker.errors import IncompleteNamespaceError, MissingNamespaceError

NS_SEPARATOR = "\\"


def normalize_namespace(value: str) -> str:
  """
  Reduces an externally supplied namespace to its first two segments.

  Args:
      value: A namespace such as ``Vendor\\Package\\Sub`` (a leading
          separator is ignored).

  Returns:
      str: ``Vendor\\Package``.

  Raises:
      IncompleteNamespaceError: If fewer than two segments are present.
  """
  segments = [s for s in value.strip().split(NS_SEPARATOR) if s]
  if len(segments) < 2:
    raise IncompleteNamespaceError(f"Expecting a namespace with at least 2 parts, got '{value}'.")
  return NS_SEPARATOR.join(segments[:2])


def resolve_namespace(stream: TokenStream, from_index: int = 0) -> str:
  """
  Reads the two-segment namespace prefix from a namespace declaration.

  Args:
      stream: The unit's token stream.
      from_index: Position to start searching from.

  Returns:
      str: The prefix, e.g. ``Vendor\\Package``.

  Raises:
      MissingNamespaceError: If the unit declares no namespace.
      IncompleteNamespaceError: If the declared namespace has a single segment.
  """
  index = stream.find_next([TokenType.NAMESPACE], from_index)
  while index is not None:
    name_index = stream.next_significant(index)
    # `namespace\foo()` is the relative-name operator, not a declaration.
    if name_index is not None and stream[name_index].kind == TokenType.IDENTIFIER:
      segments = _read_segments(stream, name_index)
      if len(segments) < 2:
        raise IncompleteNamespaceError(f"Namespace expected to have 2 parts, found '{NS_SEPARATOR.join(segments)}'.")
      return NS_SEPARATOR.join(segments[:2])
    index = stream.find_next([TokenType.NAMESPACE], index + 1)

  raise MissingNamespaceError("Expected to find a namespace declaration to qualify the marker call.")


def _read_segments(stream: TokenStream, index: int) -> List[str]:
  """Collects `Name\\Name\\...` starting at an identifier."""
  segments = [stream[index].value]
  while True:
    sep = stream.next_significant(index)
    if sep is None or stream[sep].kind != TokenType.NS_SEPARATOR:
      return segments
    part = stream.next_significant(sep)
    if part is None or stream[part].kind != TokenType.IDENTIFIER:
      return segments
    segments.append(stream[part].value)
    index = part
