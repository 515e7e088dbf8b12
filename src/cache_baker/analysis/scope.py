"""
Lexical scope records used during a single walk.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ScopeKind(str, Enum):
  FILE = "file"
  ROUTINE = "routine"
  CLOSURE = "closure"


@dataclass
class Scope:
  """
  A region whose direct statements are analyzed (and cached) independently.

  Attributes:
      kind: File body, named routine or closure.
      start: Index of the opening token (`{`, or for the file the open tag or the end of
          its leading declare/namespace statements). Markers are inserted after it.
      end: Last index scanned (the matching `}` or the final token of the file).
      parent: The enclosing scope, None for the file.
  """

  kind: ScopeKind
  start: int
  end: int
  parent: Optional["Scope"] = None

