"""
Marker Emission for Dynamic Scopes.

Turns a dynamic `Verdict` into a `Diagnostic` and, in fix mode, inserts the
marker statement that tells the caching layer never to cache the scope:

    Vendor\\Package\\framework\\Cache::noCache();

The marker goes directly after the scope's opening token (the open tag for
the file body, the `{` of a routine or closure), ahead of every statement.
"""

from typing import Callable, List, Optional

from cache_baker.analysis.classifier import Verdict, VerdictKind
from cache_baker.analysis.scope import Scope
from cache_baker.core.diagnostics import Diagnostic, DiagnosticCode
from cache_baker.core.fixer import Fixer
from cache_baker.core.tokens import Token
from cache_baker.core.tracer import TraceLogger

FRAMEWORK_PATH = "framework"
MARKER_CLASS = "Cache"
MARKER_METHOD = "noCache"


def marker_statement(namespace: str) -> str:
  """
  Builds the marker statement for a two-segment namespace prefix.

  Args:
      namespace: e.g. ``Vendor\\Package``.

  Returns:
      str: ``Vendor\\Package\\framework\\Cache::noCache();``
  """
  return f"{namespace}\\{FRAMEWORK_PATH}\\{MARKER_CLASS}::{MARKER_METHOD}();"


def _plural(count: int) -> str:
  return "" if count == 1 else "s"


def format_message(verdict: Verdict) -> str:
  """Renders the human readable message for a dynamic verdict."""
  if verdict.kind == VerdictKind.ALWAYS_DYNAMIC:
    return f"The {verdict.name}() function makes the code block dynamic for all requests"

  if verdict.kind == VerdictKind.INSUFFICIENT_ARGUMENTS:
    return (
      f"The {verdict.name}() function with {verdict.actual} argument{_plural(verdict.actual)} "
      "makes the code block dynamic for all requests; "
      f"use at least {verdict.required} argument{_plural(verdict.required)} to make it a static call"
    )

  if verdict.kind == VerdictKind.UNKNOWN_ARGUMENT_COUNT:
    return (
      f"The {verdict.name}() function requires at least {verdict.required} argument{_plural(verdict.required)} "
      "to make it a static call, but the call cannot be checked due to the use of argument unpacking"
    )

  raise ValueError(f"Verdict '{verdict.kind.value}' does not describe a dynamic call.")


_CODES = {
  VerdictKind.ALWAYS_DYNAMIC: DiagnosticCode.ALWAYS_DYNAMIC,
  VerdictKind.INSUFFICIENT_ARGUMENTS: DiagnosticCode.INSUFFICIENT_ARGUMENTS,
  VerdictKind.UNKNOWN_ARGUMENT_COUNT: DiagnosticCode.UNKNOWN_ARGUMENT_COUNT,
}


class FixEmitter:
  """
  Records diagnostics and inserts at most one marker per scope.

  Attributes:
      diagnostics (List[Diagnostic]): Findings in the order they were emitted.
  """

  def __init__(
    self,
    fixer: Fixer,
    namespace_provider: Callable[[], str],
    tracer: Optional[TraceLogger] = None,
  ):
    """
    Args:
        fixer: Edit recorder for the unit. Its `enabled` flag selects fix mode.
        namespace_provider: Returns the marker's namespace prefix. Only called
            in fix mode, right before the first insertion.
        tracer: Optional trace logger.
    """
    self.fixer = fixer
    self.namespace_provider = namespace_provider
    self.tracer = tracer
    self.diagnostics: List[Diagnostic] = []
    self._marked: set = set()

  def emit(self, verdict: Verdict, token: Token, scope: Scope) -> bool:
    """
    Reports a dynamic call and, in fix mode, marks its scope.

    Args:
        verdict: A dynamic verdict for the call.
        token: The call's name token (used for the diagnostic position).
        scope: The scope the call sits directly in.

    Returns:
        bool: True if a marker was inserted and the caller should stop
        scanning the scope.

    Raises:
        MissingNamespaceError: Fix mode without a resolvable namespace.
        IncompleteNamespaceError: Fix mode with a one-segment namespace.
    """
    diagnostic = Diagnostic(
      code=_CODES[verdict.kind],
      message=format_message(verdict),
      line=token.line,
      column=token.column,
    )
    self.diagnostics.append(diagnostic)

    if not self.fixer.enabled:
      return False

    if scope.start not in self._marked:
      marker = marker_statement(self.namespace_provider())
      self.fixer.add_content(scope.start, marker)
      self._marked.add(scope.start)
      if self.tracer:
        self.tracer.log_fix(scope.kind.value, scope.start, marker)

    diagnostic.fixed = True
    return True
