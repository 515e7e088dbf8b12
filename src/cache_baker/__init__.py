"""
cache-baker Package.

A static determinism pass for PHP sources that are baked into a response
cache. Every scope (file body, routine, closure) that calls a clock, a random
source or another catalogued dynamic function gets a marker statement telling
the caching layer never to cache its output.

Usage
-----

Simple String Baking
^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import cache_baker
    code = "<?php\\nnamespace Vendor\\\\Package;\\necho time();\\n"
    print(cache_baker.bake(code))
    # <?php
    # namespace Vendor\\Package;Vendor\\Package\\framework\\Cache::noCache();
    # echo time();

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from cache_baker import BakeEngine, RuntimeConfig

    config = RuntimeConfig(namespace="Vendor\\\\Package", rules={"uniqid": None})
    engine = BakeEngine(config=config)
    res = engine.check(code)

    for diagnostic in res.diagnostics:
        print(diagnostic.format())
"""

from pathlib import Path
from typing import Optional

from cache_baker.analysis.catalogue import DeterminismCatalogue
from cache_baker.config import RuntimeConfig
from cache_baker.core.engine import BakeEngine, BakeResult
from cache_baker.errors import (
  BakeError,
  IncompleteNamespaceError,
  MalformedScopeBoundaryError,
  MissingNamespaceError,
  NamespaceError,
)

__version__ = "0.1.0"

_ERRORS = {
  MissingNamespaceError.kind: MissingNamespaceError,
  IncompleteNamespaceError.kind: IncompleteNamespaceError,
}


def bake(
  content: Optional[str] = None,
  filepath: Optional[Path] = None,
  strip_first_open_tag: bool = False,
  namespace: str = "",
  catalogue: Optional[DeterminismCatalogue] = None,
) -> str:
  """
  Bakes PHP source for cache integration and returns the modified content.

  Args:
      content (str, optional): The PHP source. If None, `filepath` is read.
      filepath (Path, optional): File to read when no content is given.
      strip_first_open_tag (bool): Remove the first ``<?php`` so the result
          can be passed to ``eval``.
      namespace (str): Namespace the file operates in. When empty, it is read
          from the file's namespace declaration if a marker is needed.
      catalogue (DeterminismCatalogue, optional): Rules to apply instead of
          the stock catalogue.

  Returns:
      str: The baked source code.

  Raises:
      FileNotFoundError: If no content is given and `filepath` does not exist.
      ValueError: If neither content nor filepath is given.
      BakeError: If the unit can't be baked (e.g. `MissingNamespaceError`).
  """
  if content is None:
    if filepath is None:
      raise ValueError("Either content or filepath must be given.")
    path = Path(filepath)
    if not path.is_file():
      raise FileNotFoundError(f"File does not exist: {path}")
    content = path.read_text(encoding="utf-8")

  config = RuntimeConfig(namespace=namespace or None, strip_first_open_tag=strip_first_open_tag)
  engine = BakeEngine(config=config, catalogue=catalogue)
  result = engine.run(content)

  if not result.success:
    error_cls = _ERRORS.get(result.failure, BakeError)
    raise error_cls("\n".join(result.errors))

  return result.code


__all__ = [
  "BakeEngine",
  "BakeError",
  "BakeResult",
  "DeterminismCatalogue",
  "IncompleteNamespaceError",
  "MalformedScopeBoundaryError",
  "MissingNamespaceError",
  "NamespaceError",
  "RuntimeConfig",
  "bake",
  "__version__",
]
