"""
Entry point for module execution (``python -m cache_baker``).

This module delegates execution to the CLI handler in ``cache_baker.cli.__main__``.
"""

import sys
from cache_baker.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
