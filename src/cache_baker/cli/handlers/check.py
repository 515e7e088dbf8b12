"""
Check Command Handler.

Runs the determinism pass in check mode over PHP files and reports every
dynamic call found, without modifying anything.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from rich.table import Table

from cache_baker.config import RuntimeConfig
from cache_baker.core.engine import BakeEngine, BakeResult
from cache_baker.utils.console import console, log_error, log_info


def collect_sources(path: Path, extensions: List[str]) -> List[Path]:
  """
  Lists the files to process.

  Args:
      path: A file (returned as-is) or a directory (searched recursively).
      extensions: Accepted suffixes, e.g. ``[".php"]``.

  Returns:
      List[Path]: Sorted source files.
  """
  if path.is_file():
    return [path]
  wanted = {e.lower() for e in extensions}
  return sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in wanted)


def handle_check(path: Path, rules: Dict[str, Optional[int]], json_mode: bool = False) -> int:
  """
  Scans a file or directory and reports dynamic calls.

  Args:
      path: Input PHP file or directory.
      rules: Extra catalogue rules from the command line.
      json_mode: If True, output JSON to stdout and suppress Rich output.

  Returns:
      int: Exit code (0 if every file is deterministic, 1 otherwise).
  """
  if not path.exists():
    log_error(f"Path not found: {path}")
    return 1

  try:
    config = RuntimeConfig.load(rules=rules, search_path=path if path.is_dir() else path.parent)
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  engine = BakeEngine(config=config)
  files = collect_sources(path, config.extensions)

  if not json_mode:
    log_info(f"Checking {len(files)} files against {len(engine.catalogue)} catalogued functions...")

  results: Dict[str, BakeResult] = {}
  for f in files:
    try:
      code = f.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as e:
      log_error(f"Failed to read {f}: {e}")
      results[str(f)] = BakeResult(success=False, errors=[str(e)], failure="ReadError")
      continue

    result = engine.check(code)
    if not result.success:
      # Logged even in JSON mode, as these are critical
      log_error(f"Failed to check {f.name}: {'; '.join(result.errors)}")
    results[str(f)] = result

  failed = any(not r.success or r.diagnostics for r in results.values())

  if json_mode:
    output_list = []
    for filename in sorted(results):
      res = results[filename]
      for d in res.diagnostics:
        output_list.append(
          {
            "file": filename,
            "line": d.line,
            "column": d.column,
            "code": d.code.value,
            "message": d.message,
          }
        )
      if not res.success:
        output_list.append({"file": filename, "code": res.failure, "message": "; ".join(res.errors)})

    print(json.dumps(output_list, indent=2))
    return 1 if failed else 0

  findings = [(filename, d) for filename, res in results.items() for d in res.diagnostics]
  if findings:
    table = Table(title="Dynamic Calls")
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Code", style="magenta")
    table.add_column("Message", style="red")

    for filename, d in findings:
      table.add_row(filename, f"{d.line}:{d.column}", d.code.value, d.message)

    console.print(table)
    console.print("\n")

  dynamic_files = sum(1 for r in results.values() if r.diagnostics)
  failed_files = sum(1 for r in results.values() if not r.success)

  console.print(f"[bold]Check Summary for {path.name}[/bold]")
  console.print(f"Files Checked:  {len(results)}")
  console.print(f"Deterministic:  [green]{len(results) - dynamic_files - failed_files}[/green]")
  console.print(f"Dynamic:        [yellow]{dynamic_files}[/yellow]")
  console.print(f"Failed:         [red]{failed_files}[/red]")
  console.print(f"Findings:       [red]{len(findings)}[/red]")

  return 1 if failed else 0
