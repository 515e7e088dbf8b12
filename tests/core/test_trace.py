"""
Tests for the Tracing System.
"""

from cache_baker.core.tracer import TraceEventType, TraceLogger


def test_phase_nesting():
  logger = TraceLogger()

  p1 = logger.start_phase("Parent")
  logger.start_phase("Child")
  logger.end_phase()  # End Child
  logger.end_phase()  # End Parent

  events = logger.export()

  # 4 events: Start P, Start C, End C, End P
  assert len(events) == 4
  assert events[0]["type"] == TraceEventType.PHASE_START
  assert events[1]["parent_id"] == p1
  assert events[2]["type"] == TraceEventType.PHASE_END


def test_end_phase_without_start_is_ignored():
  logger = TraceLogger()
  logger.end_phase()
  assert logger.export() == []


def test_events_attach_to_active_phase():
  logger = TraceLogger()
  phase = logger.start_phase("Analysis")
  logger.log_scope("routine", 4, 20)
  logger.log_verdict("time", "always_dynamic", 3)
  logger.log_fix("routine", 4, "A\\B\\framework\\Cache::noCache();")

  events = logger.export()[1:]

  assert [e["type"] for e in events] == [
    TraceEventType.SCOPE_ENTER,
    TraceEventType.VERDICT,
    TraceEventType.FIX_APPLIED,
  ]
  assert all(e["parent_id"] == phase for e in events)
  assert events[0]["metadata"] == {"start": 4, "end": 20}
  assert events[1]["metadata"] == {"verdict": "always_dynamic", "line": 3}


def test_warning_event():
  logger = TraceLogger()
  logger.log_warning("Unbalanced '{'")

  event = logger.export()[0]
  assert event["type"] == TraceEventType.ANALYSIS_WARNING
  assert event["description"] == "Unbalanced '{'"
