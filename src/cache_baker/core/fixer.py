"""
Textual Fixer for a Token Stream.

The `Fixer` owns every edit made to one source unit. Edits are keyed on
token indices of the original stream and rendered together by
`get_contents`, so analysis can keep doing index arithmetic on the pre-fix
layout while fixes accumulate.
"""

from typing import Dict, List

from cache_baker.core.tokens import TokenStream


class Fixer:
  """
  Records content insertions and replacements against a `TokenStream`.

  Attributes:
      enabled (bool): True in fix mode. Analysis consults this to decide
          whether to rewrite or only report.
  """

  def __init__(self, stream: TokenStream, enabled: bool = True):
    self.stream = stream
    self.enabled = enabled
    self._before: Dict[int, List[str]] = {}
    self._after: Dict[int, List[str]] = {}
    self._replaced: Dict[int, str] = {}
    self._count = 0

  @property
  def fix_count(self) -> int:
    """Number of edits recorded so far."""
    return self._count

  def add_content(self, index: int, content: str) -> None:
    """Inserts `content` directly after the token at `index`."""
    self._check_index(index)
    self._after.setdefault(index, []).append(content)
    self._count += 1

  def add_content_before(self, index: int, content: str) -> None:
    """Inserts `content` directly before the token at `index`."""
    self._check_index(index)
    self._before.setdefault(index, []).append(content)
    self._count += 1

  def replace_token(self, index: int, content: str) -> None:
    """
    Replaces the text of the token at `index`.

    Content added before or after the token is kept.
    """
    self._check_index(index)
    self._replaced[index] = content
    self._count += 1

  def get_contents(self) -> str:
    """Renders the stream with all recorded edits applied."""
    parts: List[str] = []
    for i, token in enumerate(self.stream):
      parts.extend(self._before.get(i, []))
      parts.append(self._replaced.get(i, token.value))
      parts.extend(self._after.get(i, []))
    return "".join(parts)

  def _check_index(self, index: int) -> None:
    if not 0 <= index < len(self.stream):
      raise IndexError(f"Token index {index} is outside the stream (size {len(self.stream)}).")
