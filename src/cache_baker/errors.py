"""
Exception Hierarchy for cache-baker.

Namespace failures are fatal for the unit being baked: no partial fix is
applied and the unit is reported as failed. Boundary failures are contained
by the `ScopeWalker` and only abandon the scope they occur in.
"""


class BakeError(Exception):
  """Base class for all errors raised while baking a source unit."""

  #: Stable identifier used in reports (e.g. ``BakeResult.failure``).
  kind = "BakeError"


class NamespaceError(BakeError, ValueError):
  """A fully-qualified marker call could not be constructed."""

  kind = "NamespaceError"


class MissingNamespaceError(NamespaceError):
  """No namespace was supplied and the source declares none."""

  kind = "MissingNamespace"


class IncompleteNamespaceError(NamespaceError):
  """The namespace has fewer than the two segments the marker requires."""

  kind = "IncompleteNamespace"


class MalformedScopeBoundaryError(BakeError):
  """
  An opening delimiter has no matching closer.

  Attributes:
      index: Position of the unmatched opener in the token stream.
  """

  kind = "MalformedScopeBoundary"

  def __init__(self, index: int, message: str = ""):
    self.index = index
    super().__init__(message or f"No matching closer for the group opened at token {index}")
