"""
Catalogue of Non-Deterministic Calls.

A `DeterminismCatalogue` maps a function name to a `DeterminismRule`:

- ``threshold=None``: every call makes the enclosing scope dynamic
  (``time()``, ``mt_rand()``).
- ``threshold=N``: a call is dynamic only when it supplies fewer than N
  arguments. Supplying them (usually an explicit timestamp, as in
  ``date('Y', $ts)``) makes the result reproducible.

The catalogue is built once and never mutated; `extended` returns a new
instance. It is the only object shared between concurrent bakes.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional


@dataclass(frozen=True)
class DeterminismRule:
  """
  Policy for one function name.

  Attributes:
      name: Lower-cased function name.
      threshold: Argument count that makes the call static, or None if the
          call is always dynamic.
  """

  name: str
  threshold: Optional[int] = None

  def __post_init__(self) -> None:
    if not self.name:
      raise ValueError("Rule name must not be empty.")
    if self.threshold is not None and self.threshold < 1:
      raise ValueError(f"Threshold for '{self.name}' must be at least 1, got {self.threshold}.")

  @property
  def always_dynamic(self) -> bool:
    """True if no argument count can make the call static."""
    return self.threshold is None


# Function name -> number of arguments that make the call static (None: always dynamic).
DEFAULT_RULES: Dict[str, Optional[int]] = {
  "rand": None,
  "date": 2,
  "localtime": 1,
  "time": None,
  "microtime": None,
  "gettimeofday": None,
  "getdate": 1,
  "gmdate": 2,
  "gmmktime": 6,
  "gmstrftime": 2,
  "idate": 2,
  "mktime": 6,
  "strftime": 2,
  "strtotime": 2,
  "curl_exec": None,
  "shuffle": None,
  "str_shuffle": None,
  "easter_date": 1,
  "easter_days": 1,
  "array_rand": None,
  "lcg_value": None,
  "gmp_random": None,
  "mt_rand": None,
  "random_int": None,
  "random_bytes": None,
}


class DeterminismCatalogue:
  """
  Immutable, case-insensitive lookup of `DeterminismRule` by function name.
  """

  def __init__(self, rules: Mapping[str, Optional[int]]):
    """
    Args:
        rules: Mapping of function name to threshold (None for always dynamic).

    Raises:
        ValueError: If a name is empty or a threshold is below 1.
    """
    built = {}
    for name, threshold in rules.items():
      key = name.strip().lower()
      built[key] = DeterminismRule(key, threshold)
    self._rules = MappingProxyType(built)

  @classmethod
  def default(cls) -> "DeterminismCatalogue":
    """Returns the stock catalogue of clock, random and external-state calls."""
    return _DEFAULT

  @classmethod
  def from_mapping(cls, rules: Mapping[str, Optional[int]]) -> "DeterminismCatalogue":
    """Builds a catalogue that replaces the defaults entirely."""
    return cls(rules)

  def extended(self, rules: Mapping[str, Optional[int]]) -> "DeterminismCatalogue":
    """
    Returns a new catalogue with `rules` added or overriding existing entries.

    Args:
        rules: Mapping of function name to threshold.

    Returns:
        DeterminismCatalogue: The merged catalogue. `self` is unchanged.
    """
    merged: Dict[str, Optional[int]] = {name: rule.threshold for name, rule in self._rules.items()}
    for name, threshold in rules.items():
      merged[name.strip().lower()] = threshold
    return DeterminismCatalogue(merged)

  def get(self, name: str) -> Optional[DeterminismRule]:
    """Looks up a rule, ignoring case."""
    return self._rules.get(name.lower())

  def __contains__(self, name: object) -> bool:
    return isinstance(name, str) and name.lower() in self._rules

  def __iter__(self) -> Iterator[str]:
    return iter(self._rules)

  def __len__(self) -> int:
    return len(self._rules)

  def __repr__(self) -> str:
    return f"DeterminismCatalogue({len(self._rules)} rules)"


_DEFAULT = DeterminismCatalogue(DEFAULT_RULES)
