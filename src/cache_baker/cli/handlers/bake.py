"""
Bake Command Handler.

This module implements the logic for the `cache-baker bake` command.
It orchestrates:
1. Configuration loading (TOML + CLI overrides).
2. Fix-mode analysis via the Engine.
3. Output writing and trace logging.
"""

import json
from pathlib import Path
from typing import Dict, Optional

from rich.table import Table

from cache_baker.cli.handlers.check import collect_sources
from cache_baker.config import RuntimeConfig
from cache_baker.core.engine import BakeEngine, BakeResult
from cache_baker.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
)


def handle_bake(
  input_path: Path,
  output_path: Optional[Path],
  namespace: Optional[str],
  strip_first_open_tag: Optional[bool],
  rules: Dict[str, Optional[int]],
  json_trace_path: Optional[Path] = None,
) -> int:
  """
  Handles the 'bake' command execution.

  Args:
      input_path: Path to the PHP file or directory to bake.
      output_path: Path where baked code should be saved. A single file is
          printed to stdout when omitted.
      namespace: Override for the marker namespace.
      strip_first_open_tag: Override for open tag stripping.
      rules: Extra catalogue rules from the command line.
      json_trace_path: Optional path to dump execution trace JSON.

  Returns:
      int: Exit code (0 for success, 1 if any file failed).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  try:
    config = RuntimeConfig.load(
      namespace=namespace,
      strip_first_open_tag=strip_first_open_tag,
      rules=rules,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  engine = BakeEngine(config=config)

  if input_path.is_file():
    result = _bake_single_file(input_path, output_path, engine, json_trace_path)
    return 0 if result.success else 1

  if not output_path:
    log_error("Directory baking requires --out destination directory.")
    return 1

  sources = collect_sources(input_path, config.extensions)
  if not sources:
    log_warning(f"No {', '.join(config.extensions)} files found in {input_path}")
    return 0

  log_info(f"Baking {len(sources)} files from {input_path}...")

  batch_results: Dict[str, BakeResult] = {}

  for src_file in sources:
    rel_path = src_file.relative_to(input_path)
    dest_file = output_path / rel_path

    batch_trace = None
    if json_trace_path:
      # One trace per file, written next to the baked output.
      batch_trace = dest_file.with_suffix(".trace.json")

    batch_results[str(rel_path)] = _bake_single_file(src_file, dest_file, engine, batch_trace)

  _print_batch_summary(batch_results)
  return 0 if all(r.success for r in batch_results.values()) else 1


def _bake_single_file(
  input_path: Path,
  output_path: Optional[Path],
  engine: BakeEngine,
  json_trace_path: Optional[Path] = None,
) -> BakeResult:
  """
  Bakes one file and writes the result.

  Args:
      input_path: Source file path.
      output_path: Destination file path, or None for stdout.
      engine: Configured engine.
      json_trace_path: Path to save trace event logs.

  Returns:
      BakeResult: Result object containing status and code.
  """
  try:
    with open(input_path, "rt", encoding="utf-8") as f:
      code = f.read()
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to read {input_path}: {e}")
    return BakeResult(success=False, errors=[str(e)], failure="ReadError")

  result = engine.run(code)

  if json_trace_path and result.trace_events:
    try:
      json_trace_path.parent.mkdir(parents=True, exist_ok=True)
      with open(json_trace_path, "wt", encoding="utf-8") as f:
        json.dump(result.trace_events, f, indent=2)
      log_info(f"Trace saved to [path]{json_trace_path}[/path]")
    except OSError as e:
      log_error(f"Failed to write trace: {e}")

  if not result.success:
    log_error(f"Failed to bake {input_path} ({result.failure}): {'; '.join(result.errors)}")
    return result

  if output_path:
    try:
      output_path.parent.mkdir(parents=True, exist_ok=True)
      with open(output_path, "wt", encoding="utf-8") as f:
        f.write(result.code)
    except OSError as e:
      log_error(f"Failed to write {output_path}: {e}")
      return BakeResult(success=False, errors=[str(e)], failure="WriteError", diagnostics=result.diagnostics)
    log_success(f"Baked: [path]{input_path}[/path] -> [path]{output_path}[/path] ({result.fixes_applied} markers)")
  else:
    print(result.code, end="")

  return result


def _print_batch_summary(results: Dict[str, BakeResult]) -> None:
  """
  Renders a summary table of bake results to the console.

  Args:
      results: Dictionary mapping filenames to bake results.
  """
  total = len(results)
  failures = sum(1 for r in results.values() if not r.success)
  marked = sum(1 for r in results.values() if r.success and r.fixes_applied)

  if failures == 0:
    log_success(f"Batch Complete: {total} files baked, {marked} with noCache markers.")
    return

  table = Table(title="Bake Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename, res in results.items():
    if res.success:
      continue
    issues = "; ".join(res.errors) if res.errors else "Unknown Error"
    table.add_row(filename, f"❌ {res.failure or 'Failed'}", issues)

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {total - failures} Baked ({marked} marked), {failures} Failed.")
