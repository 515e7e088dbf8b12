"""
Main Entry Point for cache-baker CLI.

This module handles argument parsing and dispatches to the command
handlers defined in `cache_baker.cli.handlers`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from cache_baker import __version__
from cache_baker.cli import handlers
from cache_baker.config import parse_rule_overrides
from cache_baker.utils.console import log_error


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="cache-baker: Mark non-deterministic PHP scopes as uncacheable")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  rule_help = "Extra catalogue rules in name=threshold format (use name=none for always dynamic)"

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Report dynamic calls without changing files")
  cmd_check.add_argument("path", type=Path, help="Input PHP file or directory")
  cmd_check.add_argument("--rule", nargs="*", help=rule_help)
  cmd_check.add_argument("--json", action="store_true", help="Print findings as JSON to stdout")

  # --- Command: BAKE ---
  cmd_bake = subparsers.add_parser("bake", help="Insert noCache markers into dynamic scopes")
  cmd_bake.add_argument("path", type=Path, help="Input PHP file or directory")
  cmd_bake.add_argument("--out", type=Path, help="Output destination (file or dir)")
  cmd_bake.add_argument("--namespace", default=None, help="Namespace used to qualify markers (default: from toml/file)")
  cmd_bake.add_argument(
    "--strip-open-tag",
    action="store_true",
    default=None,
    help="Remove the first '<?php' so the output can be eval'd (Overrides config)",
  )
  cmd_bake.add_argument("--rule", nargs="*", help=rule_help)
  cmd_bake.add_argument("--json-trace", type=Path, default=None, help="Dump the execution trace to a JSON file.")

  args = parser.parse_args(argv)

  try:
    rules = parse_rule_overrides(args.rule)
  except ValueError as e:
    log_error(str(e))
    return 2

  if args.command == "check":
    return handlers.handle_check(args.path, rules, args.json)

  elif args.command == "bake":
    return handlers.handle_bake(args.path, args.out, args.namespace, args.strip_open_tag, rules, args.json_trace)

  return 0


if __name__ == "__main__":
  sys.exit(main())
