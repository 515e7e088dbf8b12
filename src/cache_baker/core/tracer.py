"""
Bake Trace Logger.

This module provides the infrastructure to record the step-by-step execution
of a bake. It captures:
1. Lifecycle Phases (Tokenizing, Analysis, Rendering).
2. Scope entries (File, Routine, Closure bodies).
3. Call verdicts and the fixes they caused.

The output is a structured list of Event Log dictionaries suitable for JSON serialization.
Each engine run owns its own logger; nothing is shared between units.
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TraceEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  SCOPE_ENTER = "scope_enter"
  VERDICT = "verdict"
  FIX_APPLIED = "fix_applied"
  ANALYSIS_WARNING = "analysis_warning"


@dataclass
class TraceEvent:
  id: str
  type: TraceEventType
  timestamp: float
  description: str
  parent_id: Optional[str] = None
  metadata: Dict[str, Any] = field(default_factory=dict)


class TraceLogger:
  """
  Records bake events for inspection.
  Injected into the ScopeWalker by the Engine.
  """

  def __init__(self):
    self._events: List[TraceEvent] = []
    self._active_phases: List[str] = []  # Stack of phase IDs

  def start_phase(self, name: str, description: str = "") -> str:
    """Starts a nested phase (e.g., 'Analysis'). Returns Phase ID."""
    phase_id = str(uuid.uuid4())
    parent = self._active_phases[-1] if self._active_phases else None

    event = TraceEvent(
      id=phase_id,
      type=TraceEventType.PHASE_START,
      timestamp=time.time(),
      description=name,
      parent_id=parent,
      metadata={"detail": description},
    )
    self._events.append(event)
    self._active_phases.append(phase_id)
    return phase_id

  def end_phase(self):
    """Ends the current active phase."""
    if not self._active_phases:
      return

    phase_id = self._active_phases.pop()
    event = TraceEvent(
      id=str(uuid.uuid4()),
      type=TraceEventType.PHASE_END,
      timestamp=time.time(),
      description="End Phase",
      parent_id=phase_id,
    )
    self._events.append(event)

  def log_scope(self, kind: str, start: int, end: int):
    """Logs entry into a scope body."""
    self._log_simple(TraceEventType.SCOPE_ENTER, f"Entered {kind} scope", {"start": start, "end": end})

  def log_verdict(self, name: str, verdict: str, line: int):
    """Logs the classification of a catalogued call."""
    self._log_simple(TraceEventType.VERDICT, f"Classified {name}()", {"verdict": verdict, "line": line})

  def log_fix(self, scope_kind: str, index: int, marker: str):
    """Logs a marker insertion."""
    self._log_simple(
      TraceEventType.FIX_APPLIED,
      f"Marked {scope_kind} scope as dynamic",
      {"index": index, "marker": marker},
    )

  def log_warning(self, message: str):
    self._log_simple(TraceEventType.ANALYSIS_WARNING, message, {"level": "warning"})

  def _log_simple(self, evt_type: TraceEventType, desc: str, meta: Dict[str, Any]):
    parent = self._active_phases[-1] if self._active_phases else None
    self._events.append(
      TraceEvent(
        id=str(uuid.uuid4()), type=evt_type, timestamp=time.time(), description=desc, parent_id=parent, metadata=meta
      )
    )

  def export(self) -> List[Dict[str, Any]]:
    """Returns list of dicts for JSON serialization."""
    return [asdict(e) for e in self._events]
