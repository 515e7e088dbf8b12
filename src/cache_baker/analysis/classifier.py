"""
Call Determinism Classification.

Combines a call's name and structural argument count with the catalogue to
produce a `Verdict`. Exactly one verdict is produced per call site.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cache_baker.analysis.catalogue import DeterminismCatalogue


class VerdictKind(str, Enum):
  """Outcome of classifying a single call site."""

  CLEAR = "clear"
  ALWAYS_DYNAMIC = "always_dynamic"
  INSUFFICIENT_ARGUMENTS = "insufficient_arguments"
  UNKNOWN_ARGUMENT_COUNT = "unknown_argument_count"
  ALREADY_MARKED = "already_marked"


@dataclass(frozen=True)
class Verdict:
  """
  Attributes:
      kind: The classification.
      name: The call name as written in source.
      actual: Counted arguments (INSUFFICIENT_ARGUMENTS only).
      required: Threshold that would make the call static.
  """

  kind: VerdictKind
  name: str = ""
  actual: Optional[int] = None
  required: Optional[int] = None

  @property
  def is_dynamic(self) -> bool:
    """True for verdicts that call for a marker."""
    return self.kind in (
      VerdictKind.ALWAYS_DYNAMIC,
      VerdictKind.INSUFFICIENT_ARGUMENTS,
      VerdictKind.UNKNOWN_ARGUMENT_COUNT,
    )


def classify(name: str, arg_count: int, has_unpack: bool, catalogue: DeterminismCatalogue) -> Verdict:
  """
  Classifies a call against the catalogue.

  Args:
      name: Function name as written (lookup ignores case).
      arg_count: Top-level arguments counted at the call site.
      has_unpack: Whether the call spreads an argument collection.
      catalogue: The rules to apply.

  Returns:
      Verdict: CLEAR for unknown names and calls meeting their threshold.
  """
  rule = catalogue.get(name)
  if rule is None:
    return Verdict(VerdictKind.CLEAR, name)

  if rule.threshold is None:
    return Verdict(VerdictKind.ALWAYS_DYNAMIC, name)

  # Spread arguments can't be verified, whatever the literal count.
  if has_unpack:
    return Verdict(VerdictKind.UNKNOWN_ARGUMENT_COUNT, name, required=rule.threshold)

  if arg_count >= rule.threshold:
    return Verdict(VerdictKind.CLEAR, name)

  return Verdict(VerdictKind.INSUFFICIENT_ARGUMENTS, name, actual=arg_count, required=rule.threshold)
