from .bake import handle_bake, _bake_single_file, _print_batch_summary
from .check import handle_check, collect_sources

__all__ = [
  "_bake_single_file",
  "_print_batch_summary",
  "collect_sources",
  "handle_bake",
  "handle_check",
]
