"""
Diagnostic records produced by the analyzer.

Diagnostics are findings, not errors: each one is recoverable by inserting a
marker (fix mode) or reporting it (check mode).
"""

from enum import Enum

from pydantic import BaseModel, Field


class DiagnosticCode(str, Enum):
  """Stable codes distinguishing the kinds of finding."""

  ALWAYS_DYNAMIC = "DynamicFunctions.Found"
  INSUFFICIENT_ARGUMENTS = "DynamicFunctions.FoundPossibleStatic"
  UNKNOWN_ARGUMENT_COUNT = "DynamicFunctions.FoundPossibleUnpackedStatic"


class Diagnostic(BaseModel):
  """
  A single finding at a call site.
  """

  code: DiagnosticCode = Field(..., description="Stable finding code.")
  message: str = Field(..., description="Human readable explanation.")
  line: int = Field(..., description="1-based line of the call name.")
  column: int = Field(..., description="1-based column of the call name.")
  fixable: bool = Field(True, description="Whether inserting a marker resolves the finding.")
  fixed: bool = Field(False, description="True once a marker was inserted for this finding.")

  def format(self) -> str:
    """Returns a compact one-line rendering."""
    return f"{self.line}:{self.column} [{self.code.value}] {self.message}"
