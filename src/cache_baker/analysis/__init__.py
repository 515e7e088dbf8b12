"""
Static Analysis Package.

This package contains the determinism pass that runs over PHP token streams.

Modules:
    - ``catalogue``: Known dynamic functions and their static-argument thresholds.
    - ``arguments``: Structural counting of call arguments.
    - ``classifier``: Per-call verdicts.
    - ``scope``: Scope records built during a walk.
    - ``walker``: The scope-aware scanner.
    - ``fix_emitter``: Diagnostics and marker insertion.
    - ``namespace``: Namespace prefix resolution for markers.
"""
