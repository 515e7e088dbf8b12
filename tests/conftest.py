"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Engine and stream helpers shared by analysis tests.
- Console isolation so log capture in one test doesn't leak into the next.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'cache_baker' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from cache_baker.analysis.catalogue import DeterminismCatalogue  # noqa: E402
from cache_baker.analysis.walker import ScopeWalker  # noqa: E402
from cache_baker.core.fixer import Fixer  # noqa: E402
from cache_baker.core.tokens import TokenStream  # noqa: E402
from cache_baker.utils.console import reset_console  # noqa: E402

NAMESPACE = "Vendor\\Package"
MARKER = "Vendor\\Package\\framework\\Cache::noCache();"


class WalkHarness:
  """
  Runs the ScopeWalker over a snippet and exposes the outcome.
  """

  def __init__(self, code: str, fix: bool = True, namespace=NAMESPACE, catalogue=None):
    self.stream = TokenStream.from_source(code)
    self.fixer = Fixer(self.stream, enabled=fix)
    self.walker = ScopeWalker(
      self.stream,
      catalogue if catalogue is not None else DeterminismCatalogue.default(),
      self.fixer,
      namespace=namespace,
    )
    self.walker.walk_file()

  @property
  def diagnostics(self):
    return self.walker.diagnostics

  @property
  def codes(self):
    return [d.code.value for d in self.walker.diagnostics]

  @property
  def output(self) -> str:
    return self.fixer.get_contents()


@pytest.fixture
def walk():
  """Factory fixture: ``walk(code, fix=True, namespace=..., catalogue=None)``."""
  return WalkHarness


@pytest.fixture(autouse=True)
def isolate_console():
  """Ensures the console is reset to stdout after every test."""
  yield
  reset_console()
