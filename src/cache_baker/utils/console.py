"""
Console Output and Log Routing.

All user-facing output goes through one Rich console:

1.  **Log lines** (`log_info`, `log_success`, `log_warning`, `log_error`) are
    standard `logging` records rendered by a `RichHandler`.
2.  **Reports** (tables, summaries) are printed with `console.print`.

`console` is a stable object whose target can be swapped with `set_console`
(e.g. a recording console in tests) and restored with `reset_console`.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Sits between INFO (20) and WARNING (30)
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "path": "bold blue",
    "code": "bold magenta",
  }
)


class _ConsoleProxy:
  """
  Forwards printing to the active Rich console and keeps the root logger's
  handler pointed at the same console.
  """

  def __init__(self) -> None:
    self._target = Console(theme=_THEME)
    self._attach_handler()

  def retarget(self, target: Console) -> None:
    """Sends all further output (prints and logs) to `target`."""
    self._target = target
    self._attach_handler()

  def _attach_handler(self) -> None:
    root = logging.getLogger()
    for handler in [h for h in root.handlers if isinstance(h, RichHandler)]:
      root.removeHandler(handler)

    root.addHandler(RichHandler(console=self._target, show_time=False, show_path=False, markup=True))
    root.setLevel(logging.INFO)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._target.print(*args, **kwargs)


console = _ConsoleProxy()


def set_console(target: Console) -> None:
  """
  Redirects printing and logging to another console.

  Args:
      target (Console): e.g. ``Console(record=True)`` to capture output.
  """
  console.retarget(target)


def reset_console() -> None:
  """Restores a fresh console writing to standard output."""
  console.retarget(Console(theme=_THEME))


def log_info(msg: str) -> None:
  """
  Logs progress information.

  Args:
      msg (str): Message text, may contain rich markup such as ``[path]``.
  """
  logging.info(f"ℹ️  {msg}")


def log_success(msg: str) -> None:
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}")


def log_warning(msg: str) -> None:
  logging.warning(f"⚠️  {msg}")


def log_error(msg: str) -> None:
  logging.error(f"❌ {msg}")
