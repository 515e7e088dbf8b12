"""
Scope-Aware Determinism Scanner.

This module provides the `ScopeWalker`, which walks a PHP token stream one
lexical scope at a time and decides, for each scope, whether code directly
inside it can produce different results on different requests.

Scanning rules for a scope body:
1.  **Nested Scopes**: a routine or closure is walked recursively and then
    skipped. Each scope executes, and is cached, on its own, so calls inside
    a closure never make the enclosing scope dynamic.
2.  **Explicit Markers**: a direct `Cache::noCache()` call means the scope
    has already opted out; scanning stops without further findings.
3.  **Call Sites**: a name followed by a balanced argument list is counted
    (`count_arguments`) and classified against the catalogue (`classify`).
    Method calls, static calls, instantiations and qualified non-global
    names are not function calls and are ignored.
4.  **Fixes**: dynamic verdicts go to the `FixEmitter`, which inserts the marker
    after the scope opener (for the file, after any leading `declare` and
    `namespace` statements). Once a marker is inserted, the rest of the
    scope carries no new information and scanning stops. In check mode
    scanning continues so every finding is reported.
"""

from dataclasses import dataclass
from typing import List, Optional

from cache_baker.analysis.arguments import count_arguments, is_callable_reference
from cache_baker.analysis.catalogue import DeterminismCatalogue
from cache_baker.analysis.classifier import Verdict, VerdictKind, classify
from cache_baker.analysis.fix_emitter import MARKER_CLASS, MARKER_METHOD, FixEmitter
from cache_baker.analysis.namespace import normalize_namespace, resolve_namespace
from cache_baker.analysis.scope import Scope, ScopeKind
from cache_baker.core.diagnostics import Diagnostic
from cache_baker.core.fixer import Fixer
from cache_baker.core.tokens import TokenStream, TokenType
from cache_baker.core.tracer import TraceLogger
from cache_baker.errors import MalformedScopeBoundaryError
from cache_baker.utils.console import log_warning

# Tokens that turn a following `name(` into something other than a global function call.
_NON_CALL_PREFIXES = frozenset(
  {
    TokenType.OBJECT_OPERATOR,
    TokenType.DOUBLE_COLON,
    TokenType.FUNCTION,
    TokenType.CLOSURE,
  }
)


@dataclass(frozen=True)
class Call:
  """
  A syntactic call site.

  Attributes:
      name_index: Index of the function name.
      open_index: Index of the `(`.
      close_index: Index of the matching `)`.
      name: Function name as written.
  """

  name_index: int
  open_index: int
  close_index: int
  name: str


class ScopeWalker:
  """
  Walks the scope tree of one source unit, depth first.

  Attributes:
      emitter (FixEmitter): Records findings and inserts markers.
      boundary_errors (List[MalformedScopeBoundaryError]): Scopes abandoned
          because a delimiter was never closed.
  """

  def __init__(
    self,
    stream: TokenStream,
    catalogue: DeterminismCatalogue,
    fixer: Fixer,
    namespace: Optional[str] = None,
    tracer: Optional[TraceLogger] = None,
  ):
    """
    Args:
        stream: The unit's tokens.
        catalogue: Rules used to classify calls.
        fixer: Edit recorder. Its `enabled` flag selects fix mode.
        namespace: Namespace for markers (only its first two segments are used).
            When omitted it is read from the unit's namespace declaration.
            Either way it is resolved right before the first fix.
        tracer: Optional trace logger.
    """
    self.stream = stream
    self.catalogue = catalogue
    self.fixer = fixer
    self.tracer = tracer
    self._raw_namespace = namespace or None
    self._namespace: Optional[str] = None
    self._file_start = 0
    self.emitter = FixEmitter(fixer, self._resolve_namespace, tracer)
    self.boundary_errors: List[MalformedScopeBoundaryError] = []

  @property
  def diagnostics(self) -> List[Diagnostic]:
    return self.emitter.diagnostics

  def walk_file(self) -> Optional[int]:
    """
    Walks the file scope, which opens at the first PHP open tag.

    The file marker must not precede `declare(...)` or `namespace`
    statements, so the scope body starts after any leading ones.

    Returns:
        Optional[int]: Index of the last token, or None if the unit contains no PHP.
    """
    start = self.stream.first_open_tag()
    if start is None:
      return None
    self._file_start = start
    return self.walk(Scope(ScopeKind.FILE, self._file_anchor(start), len(self.stream) - 1))

  def _file_anchor(self, open_tag: int) -> int:
    """
    Finds the token the file marker is inserted after.

    Returns:
        int: The `;` ending the last leading declare/namespace statement, the
        `{` of a braced namespace, or `open_tag` when there are none.
    """
    anchor = open_tag
    index = self.stream.next_significant(anchor)
    while index is not None:
      token = self.stream[index]
      if token.kind == TokenType.IDENTIFIER and token.value.lower() == "declare":
        end = self._declare_end(index)
      elif token.kind == TokenType.NAMESPACE:
        end = self._namespace_end(index)
      else:
        break

      if end is None:
        break
      anchor = end
      if self.stream[end].kind == TokenType.OPEN_BRACE:
        break
      index = self.stream.next_significant(anchor)
    return anchor

  def _declare_end(self, index: int) -> Optional[int]:
    """Returns the `;` of `declare(...);`, None for the block form."""
    open_index = self.stream.next_significant(index)
    if open_index is None or self.stream[open_index].kind != TokenType.OPEN_PARENTHESIS:
      return None
    close_index = self.stream[open_index].pair
    if close_index is None:
      return None
    end = self.stream.next_significant(close_index)
    if end is None or self.stream[end].kind != TokenType.SEMICOLON:
      return None
    return end

  def _namespace_end(self, index: int) -> Optional[int]:
    """Returns the `;` or `{` ending a namespace declaration."""
    name_index = self.stream.next_significant(index)
    # `namespace\foo();` is an ordinary statement.
    if name_index is None or self.stream[name_index].kind not in (TokenType.IDENTIFIER, TokenType.OPEN_BRACE):
      return None
    return self.stream.find_next([TokenType.SEMICOLON, TokenType.OPEN_BRACE], name_index)

  def walk(self, scope: Scope) -> int:
    """
    Scans the direct body of `scope`, recursing into nested scopes.

    Args:
        scope: The scope to scan.

    Returns:
        int: The scope's end index, where the caller resumes scanning.
    """
    if self.tracer:
      self.tracer.log_scope(scope.kind.value, scope.start, scope.end)

    try:
      self._scan(scope)
    except MalformedScopeBoundaryError as e:
      # The rest of this scope can't be trusted; report nothing more for it.
      self.boundary_errors.append(e)
      token = self.stream[e.index]
      msg = f"Unbalanced '{token.value}' at line {token.line}; skipping the rest of the {scope.kind.value} scope."
      log_warning(msg)
      if self.tracer:
        self.tracer.log_warning(msg)

    return scope.end

  def _scan(self, scope: Scope) -> None:
    index = scope.start
    while index < scope.end:
      index += 1
      token = self.stream[index]

      if token.kind == TokenType.FUNCTION or token.kind == TokenType.CLOSURE:
        nested = self._nested_scope(index, scope)
        if nested is not None:
          index = self.walk(nested)
        continue

      if token.kind != TokenType.IDENTIFIER:
        continue

      if self._is_marker(index):
        self._trace(Verdict(VerdictKind.ALREADY_MARKED, token.value), index)
        return

      call = self._call_at(index)
      if call is None:
        continue

      args = count_arguments(self.stream, call.open_index, call.close_index)
      verdict = classify(call.name, args.count, args.has_unpack, self.catalogue)
      if call.name in self.catalogue:
        self._trace(verdict, index)

      if verdict.is_dynamic and self.emitter.emit(verdict, token, scope):
        return

  def _nested_scope(self, index: int, parent: Scope) -> Optional[Scope]:
    """
    Builds the scope for a routine/closure body.

    Returns:
        Optional[Scope]: None for declarations without a body.

    Raises:
        MalformedScopeBoundaryError: If the body is never closed.
    """
    token = self.stream[index]
    if token.scope_opener is None:
      return None
    if token.scope_closer is None:
      raise MalformedScopeBoundaryError(token.scope_opener)

    kind = ScopeKind.CLOSURE if token.kind == TokenType.CLOSURE else ScopeKind.ROUTINE
    return Scope(kind, token.scope_opener, token.scope_closer, parent)

  def _is_marker(self, index: int) -> bool:
    """Detects `Cache::noCache` starting at `index`."""
    if self.stream[index].value.lower() != MARKER_CLASS.lower():
      return False
    colon = self.stream.next_significant(index)
    if colon is None or self.stream[colon].kind != TokenType.DOUBLE_COLON:
      return False
    method = self.stream.next_significant(colon)
    return method is not None and self.stream[method].value.lower() == MARKER_METHOD.lower()

  def _call_at(self, index: int) -> Optional[Call]:
    """
    Recognizes a global function call whose name is at `index`.

    Raises:
        MalformedScopeBoundaryError: If the argument list is never closed.
    """
    open_index = self.stream.next_significant(index)
    if open_index is None or self.stream[open_index].kind != TokenType.OPEN_PARENTHESIS:
      return None

    prev = self.stream.previous_significant(index)
    if prev is not None:
      prev_token = self.stream[prev]
      if prev_token.kind in _NON_CALL_PREFIXES:
        return None
      if prev_token.kind == TokenType.IDENTIFIER and prev_token.value.lower() == "new":
        return None
      if prev_token.kind == TokenType.NS_SEPARATOR and prev > 0:
        # `\time()` is global; `Foo\time()` is not. Qualified names never contain whitespace,
        # so `return \time()` stays global.
        if self.stream[prev - 1].kind in (TokenType.IDENTIFIER, TokenType.NAMESPACE):
          return None

    close_index = self.stream.partner(open_index)
    if is_callable_reference(self.stream, open_index, close_index):
      return None

    return Call(index, open_index, close_index, self.stream[index].value)

  def _resolve_namespace(self) -> str:
    """Resolves the namespace at most once per unit."""
    if self._namespace is None:
      if self._raw_namespace:
        self._namespace = normalize_namespace(self._raw_namespace)
      else:
        self._namespace = resolve_namespace(self.stream, self._file_start)
    return self._namespace

  def _trace(self, verdict: Verdict, index: int) -> None:
    if self.tracer:
      self.tracer.log_verdict(verdict.name, verdict.kind.value, self.stream[index].line)
