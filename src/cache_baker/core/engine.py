"""
Orchestration Engine for Cache Baking.

This module provides the `BakeEngine`, the driver that runs one PHP source
unit through the determinism pass and returns a `BakeResult`.

The Engine pipeline consists of:

1.  **Tokenizing**: `PhpLexer` + `TokenStream` provide tokens with
    paired-delimiter and scope metadata.
2.  **Analysis**: the `ScopeWalker` scans the file scope and every routine
    and closure, recording diagnostics and (in fix mode) marker insertions.
    The marker namespace (configured, or read from the unit) is only
    resolved when the first marker is needed.
3.  **Rendering**: the `Fixer` applies all insertions at once. Optionally the
    first open tag is stripped so the output can be passed to `eval`.

A unit whose namespace can't be resolved is reported as failed
(`success=False`, `failure` naming the error) and its code is returned
unchanged: fixes are never applied partially.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from cache_baker.analysis.catalogue import DeterminismCatalogue
from cache_baker.analysis.walker import ScopeWalker
from cache_baker.config import RuntimeConfig
from cache_baker.core.diagnostics import Diagnostic
from cache_baker.core.fixer import Fixer
from cache_baker.core.tokens import PhpLexer, TokenStream
from cache_baker.core.tracer import TraceLogger
from cache_baker.errors import BakeError


class BakeResult(BaseModel):
  """
  Structured result of baking a single unit.
  """

  code: str = Field(default="", description="The (possibly rewritten) source code.")
  diagnostics: List[Diagnostic] = Field(default_factory=list, description="Dynamic call findings.")
  errors: List[str] = Field(default_factory=list, description="Error messages that failed the unit.")
  success: bool = Field(default=True, description="False if the unit could not be processed.")
  failure: Optional[str] = Field(default=None, description="Kind of fatal error, e.g. 'MissingNamespace'.")
  fixes_applied: int = Field(default=0, description="Number of markers inserted.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="A log of internal trace events.")

  @property
  def has_errors(self) -> bool:
    """
    Returns:
        bool: True if the unit failed with one or more errors.
    """
    return len(self.errors) > 0

  @property
  def is_deterministic(self) -> bool:
    """True if the unit was processed and no dynamic call was found."""
    return self.success and not self.diagnostics


class BakeEngine:
  """
  Runs the determinism pass over single source units.

  The engine holds no per-unit state, so one instance can bake many units.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    catalogue: Optional[DeterminismCatalogue] = None,
  ):
    """
    Initializes the Engine.

    Args:
        config: Runtime settings. Defaults to `RuntimeConfig()`.
        catalogue: Rules to apply. Defaults to `config.build_catalogue()`.
    """
    self.config = config or RuntimeConfig()
    self.catalogue = catalogue if catalogue is not None else self.config.build_catalogue()
    self.lexer = PhpLexer()

  def run(self, code: str, fix: bool = True) -> BakeResult:
    """
    Analyzes (and in fix mode rewrites) one unit.

    Args:
        code: PHP source text.
        fix: If True, insert markers. If False, only report diagnostics.

    Returns:
        BakeResult: Rewritten code, diagnostics and status.
    """
    tracer = TraceLogger()

    tracer.start_phase("Tokenizing")
    try:
      stream = TokenStream.from_source(code, self.lexer)
    except ValueError as e:
      return self._failed(code, "LexerError", str(e), tracer)
    tracer.end_phase()

    try:
      fixer = Fixer(stream, enabled=fix)
      walker = ScopeWalker(stream, self.catalogue, fixer, namespace=self.config.namespace, tracer=tracer)

      tracer.start_phase("Analysis", "Scanning scopes for dynamic calls")
      walker.walk_file()
      tracer.end_phase()
    except BakeError as e:
      return self._failed(code, e.kind, str(e), tracer)

    fixes_applied = fixer.fix_count

    if fix and self.config.strip_first_open_tag:
      first_open = stream.first_open_tag()
      if first_open is not None:
        fixer.replace_token(first_open, "")

    tracer.start_phase("Rendering")
    output = fixer.get_contents() if fixer.fix_count else code
    tracer.end_phase()

    return BakeResult(
      code=output,
      diagnostics=walker.diagnostics,
      fixes_applied=fixes_applied,
      trace_events=tracer.export(),
    )

  def check(self, code: str) -> BakeResult:
    """Reports diagnostics without rewriting the unit."""
    return self.run(code, fix=False)

  @staticmethod
  def _failed(code: str, kind: str, message: str, tracer: TraceLogger) -> BakeResult:
    tracer.log_warning(message)
    return BakeResult(
      code=code,
      errors=[message],
      success=False,
      failure=kind,
      trace_events=tracer.export(),
    )
