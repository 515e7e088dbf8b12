"""
Runtime Configuration Store.

Settings come from the ``[tool.cache_baker]`` table of the nearest
``pyproject.toml`` and are overridden by CLI arguments:

.. code-block:: toml

    [tool.cache_baker]
    namespace = 'Vendor\\Package'
    strip_first_open_tag = false
    replace_default_rules = false
    extensions = [".php", ".inc"]

    [tool.cache_baker.rules]
    uniqid = "none"      # always dynamic
    hrtime = "none"
    date_create = 1
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from cache_baker.analysis.catalogue import DeterminismCatalogue

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

_NONE_VALUES = {"none", "null", "always", ""}


def _coerce_threshold(value: Any) -> Optional[int]:
  """Converts TOML/CLI threshold spellings to an int or None."""
  if value is None:
    return None
  if isinstance(value, bool):
    raise ValueError(f"Threshold must be an integer or 'none', got {value!r}.")
  if isinstance(value, str):
    if value.strip().lower() in _NONE_VALUES:
      return None
    value = int(value.strip())
  if not isinstance(value, int) or value < 1:
    raise ValueError(f"Threshold must be an integer >= 1 or 'none', got {value!r}.")
  return value


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the bake engine.
  """

  namespace: Optional[str] = Field(None, description="Namespace used to qualify markers (first two segments kept).")
  strip_first_open_tag: bool = Field(False, description="Remove the first '<?php' so the output can be eval'd.")
  rules: Dict[str, Optional[int]] = Field(
    default_factory=dict, description="Extra catalogue entries: name -> threshold (None: always dynamic)."
  )
  replace_default_rules: bool = Field(False, description="If True, `rules` replaces the stock catalogue.")
  extensions: List[str] = Field(default_factory=lambda: [".php"], description="File suffixes scanned in directories.")

  @field_validator("rules", mode="before")
  @classmethod
  def validate_rules(cls, v: Any) -> Dict[str, Optional[int]]:
    """
    Normalizes rule names to lowercase and thresholds to int/None.

    Raises:
        ValueError: If a name is empty or a threshold is invalid.
    """
    if v is None:
      return {}
    cleaned: Dict[str, Optional[int]] = {}
    for name, threshold in dict(v).items():
      key = str(name).strip().lower()
      if not key:
        raise ValueError("Rule names must not be empty.")
      cleaned[key] = _coerce_threshold(threshold)
    return cleaned

  @field_validator("extensions")
  @classmethod
  def validate_extensions(cls, v: List[str]) -> List[str]:
    return [e if e.startswith(".") else f".{e}" for e in v]

  def build_catalogue(self) -> DeterminismCatalogue:
    """
    Returns:
        DeterminismCatalogue: The stock catalogue extended (or replaced) by `rules`.
    """
    if self.replace_default_rules:
      return DeterminismCatalogue.from_mapping(self.rules)
    if not self.rules:
      return DeterminismCatalogue.default()
    return DeterminismCatalogue.default().extended(self.rules)

  @classmethod
  def load(
    cls,
    namespace: Optional[str] = None,
    strip_first_open_tag: Optional[bool] = None,
    rules: Optional[Dict[str, Optional[int]]] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        namespace (Optional[str]): Override for the marker namespace.
        strip_first_open_tag (Optional[bool]): Override for tag stripping.
        rules (Optional[Dict]): CLI rules, merged over the TOML rules.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config = _load_toml_settings(start_dir)

    final_namespace = namespace or toml_config.get("namespace")

    if strip_first_open_tag is not None:
      final_strip = strip_first_open_tag
    else:
      final_strip = toml_config.get("strip_first_open_tag", False)

    final_rules = {**toml_config.get("rules", {}), **(rules or {})}

    return cls(
      namespace=final_namespace,
      strip_first_open_tag=final_strip,
      rules=final_rules,
      replace_default_rules=toml_config.get("replace_default_rules", False),
      extensions=toml_config.get("extensions", [".php"]),
    )


def _load_toml_settings(start_path: Path) -> Dict[str, Any]:
  """
  Searches `start_path` and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Dict[str, Any]: The `[tool.cache_baker]` table, empty if none was found.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      with open(toml_path, "rb") as f:
        data = tomllib.load(f)
      return data.get("tool", {}).get("cache_baker", {})

  return {}


def parse_rule_overrides(items: Optional[List[str]]) -> Dict[str, Optional[int]]:
  """
  Parses a list of 'name=threshold' strings into catalogue rules.

  ``name=none`` marks a function as always dynamic.

  Args:
      items (Optional[List[str]]): Raw CLI strings directly from argparse.

  Returns:
      Dict[str, Optional[int]]: Parsed rules.

  Raises:
      ValueError: If an item is malformed.
  """
  if not items:
    return {}

  rules: Dict[str, Optional[int]] = {}
  for item in items:
    if "=" not in item:
      raise ValueError(f"Invalid rule format: '{item}'. Expected 'name=threshold'.")

    name, threshold = item.split("=", 1)
    name = name.strip().lower()
    if not name:
      raise ValueError(f"Invalid rule format: '{item}'. Missing function name.")
    rules[name] = _coerce_threshold(threshold)

  return rules
