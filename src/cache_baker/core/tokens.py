"""
PHP Tokenizer and Token Stream.

Provides a Regex-based Lexer (`PhpLexer`) that decomposes PHP source into a
stream of typed `Token` objects, and a `TokenStream` that decorates those
tokens with the structural metadata the analyzer relies on:

- **Paired delimiters**: every `(`, `[`, `#[` and `{` knows the index of its
  closer (and vice versa), so a balanced group can be skipped in O(1).
- **Routine scopes**: every `function` keyword is classified as a named
  routine (`FUNCTION`) or an anonymous closure (`CLOSURE`) and, when it has
  a body, carries the indices of the body's braces.

The lexer is lossless: concatenating the values of all tokens reproduces the
input text exactly. It only understands as much PHP as the analyzer needs;
string interpolation, for instance, is kept inside a single `STRING` token.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Generator, Iterable, Iterator, List, Optional, Tuple

from cache_baker.errors import MalformedScopeBoundaryError


class TokenType(Enum):
  """Enumeration of PHP token roles."""

  # Outside of PHP tags
  INLINE_HTML = auto()
  OPEN_TAG = auto()  # <?php, <?=
  CLOSE_TAG = auto()  # ?>

  # Trivia
  WHITESPACE = auto()
  COMMENT = auto()  # //, #, /* */, /** */

  # Literals & Names
  STRING = auto()  # '', "", heredoc, nowdoc, backticks
  NUMBER = auto()
  VARIABLE = auto()  # $name
  IDENTIFIER = auto()  # Names and keywords without a dedicated role

  # Roles with structural meaning
  FUNCTION = auto()  # Named routine declaration
  CLOSURE = auto()  # Anonymous function
  NAMESPACE = auto()

  # Punctuation
  NS_SEPARATOR = auto()  # \
  DOUBLE_COLON = auto()  # ::
  OBJECT_OPERATOR = auto()  # ->, ?->
  ELLIPSIS = auto()  # ...
  COMMA = auto()
  SEMICOLON = auto()
  OPEN_PARENTHESIS = auto()
  CLOSE_PARENTHESIS = auto()
  OPEN_BRACKET = auto()
  CLOSE_BRACKET = auto()
  ATTRIBUTE = auto()  # #[ (closed by CLOSE_BRACKET)
  OPEN_BRACE = auto()
  CLOSE_BRACE = auto()
  OPERATOR = auto()


#: Tokens that carry no syntactic meaning.
EMPTY_TOKENS = frozenset({TokenType.WHITESPACE, TokenType.COMMENT})

#: Opening delimiters mapped to the closer that balances them.
OPENERS: Dict[TokenType, TokenType] = {
  TokenType.OPEN_PARENTHESIS: TokenType.CLOSE_PARENTHESIS,
  TokenType.OPEN_BRACKET: TokenType.CLOSE_BRACKET,
  TokenType.ATTRIBUTE: TokenType.CLOSE_BRACKET,
  TokenType.OPEN_BRACE: TokenType.CLOSE_BRACE,
}

CLOSERS = frozenset(OPENERS.values())


@dataclass
class Token:
  """
  Represents a lexical unit.

  Attributes:
      kind: The role of the token (e.g., IDENTIFIER, OPEN_PARENTHESIS).
      value: The raw source text.
      line: Line number in source (1-based).
      column: Column number in source (1-based).
      pair: Index of the matching delimiter, for paired delimiters.
      scope_opener: For FUNCTION/CLOSURE, index of the body's `{`.
      scope_closer: For FUNCTION/CLOSURE, index of the body's `}`.
  """

  kind: TokenType
  value: str
  line: int
  column: int
  pair: Optional[int] = None
  scope_opener: Optional[int] = None
  scope_closer: Optional[int] = None


class PhpLexer:
  """
  Regex-based Lexer for PHP.
  """

  OPEN_TAG_PATTERN = r"<\?(?:php(?:\r\n|\s|\Z)|=)"

  # Compiled Regex Patterns (Order matters for priority)
  PATTERNS = [
    (TokenType.CLOSE_TAG, r"\?>(?:\r?\n)?"),
    (TokenType.WHITESPACE, r"\s+"),
    # Block comments run to the end of file when unterminated
    (TokenType.COMMENT, r"/\*.*?(?:\*/|\Z)"),
    (TokenType.ATTRIBUTE, r"#\["),
    # Line comments stop before a closing tag
    (TokenType.COMMENT, r"(?://|#)(?:[^\r\n?]|\?(?!>))*"),
    # Heredoc / Nowdoc
    (
      TokenType.STRING,
      r"<<<[ \t]*(?P<quote>['\"]?)(?P<label>[^\W\d]\w*)(?P=quote)\r?\n(?:.*?\n)?[ \t]*(?P=label)(?!\w)",
    ),
    (TokenType.STRING, r"'(?:[^'\\]|\\.)*'"),
    (TokenType.STRING, r'"(?:[^"\\]|\\.)*"'),
    (TokenType.STRING, r"`(?:[^`\\]|\\.)*`"),
    (TokenType.VARIABLE, r"\$[^\W\d]\w*"),
    (TokenType.ELLIPSIS, r"\.\.\."),
    (
      TokenType.NUMBER,
      r"0[xX][0-9a-fA-F_]+|0[bB][01_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?|\.\d[\d_]*(?:[eE][+-]?\d+)?",
    ),
    (TokenType.DOUBLE_COLON, r"::"),
    (TokenType.OBJECT_OPERATOR, r"\??->"),
    (TokenType.NS_SEPARATOR, r"\\"),
    (TokenType.IDENTIFIER, r"[^\W\d]\w*"),
    (TokenType.OPEN_PARENTHESIS, r"\("),
    (TokenType.CLOSE_PARENTHESIS, r"\)"),
    (TokenType.OPEN_BRACKET, r"\["),
    (TokenType.CLOSE_BRACKET, r"\]"),
    (TokenType.OPEN_BRACE, r"\{"),
    (TokenType.CLOSE_BRACE, r"\}"),
    (TokenType.COMMA, r","),
    (TokenType.SEMICOLON, r";"),
    (
      TokenType.OPERATOR,
      r"<=>|\*\*=|===|!==|<<=|>>=|\?\?=|\?\?|\*\*|\+\+|--|&&|\|\||<<|>>|=>|[-+*/%.&|^<>=!]=|[-+*/%.&|^<>=!~?@:$]",
    ),
  ]

  KEYWORDS = {
    "function": TokenType.FUNCTION,
    "namespace": TokenType.NAMESPACE,
  }

  def __init__(self) -> None:
    """Initializes the lexer with compiled patterns."""
    self.regex_pairs = [(kind, re.compile(pattern, re.DOTALL)) for kind, pattern in self.PATTERNS]
    self.open_tag = re.compile(self.OPEN_TAG_PATTERN, re.IGNORECASE)

  def tokenize(self, text: str) -> Generator[Token, None, None]:
    """
    Tokenizes the input string.

    Args:
        text: Raw PHP source code (may contain inline HTML).

    Yields:
        Token objects.

    Raises:
        ValueError: If an unrecognized character sequence is encountered.
    """
    line_num = 1
    line_start = 0
    pos = 0

    for kind, value in self._scan(text):
      yield Token(kind, value, line_num, pos - line_start + 1)

      newlines = value.count("\n")
      if newlines > 0:
        line_num += newlines
        line_start = pos + value.rfind("\n") + 1
      pos += len(value)

  def _scan(self, text: str) -> Iterator[Tuple[TokenType, str]]:
    """Splits text into (kind, value) pairs, switching between HTML and PHP modes."""
    pos = 0
    length = len(text)
    in_php = False

    while pos < length:
      if not in_php:
        match = self.open_tag.search(text, pos)
        html_end = match.start() if match else length
        if html_end > pos:
          yield TokenType.INLINE_HTML, text[pos:html_end]
        if not match:
          return
        yield TokenType.OPEN_TAG, match.group(0)
        pos = match.end()
        in_php = True
        continue

      for kind, regex in self.regex_pairs:
        match = regex.match(text, pos)
        if match:
          value = match.group(0)
          if kind == TokenType.IDENTIFIER:
            kind = self.KEYWORDS.get(value.lower(), kind)
          elif kind == TokenType.CLOSE_TAG:
            in_php = False
          yield kind, value
          pos += len(value)
          break
      else:
        line_num = text.count("\n", 0, pos) + 1
        column = pos - (text.rfind("\n", 0, pos) + 1) + 1
        snippet = text[pos : min(pos + 10, length)]
        raise ValueError(f"Illegal character at line {line_num}, col {column}: '{snippet}...'")


class TokenStream:
  """
  An indexed sequence of tokens with paired-delimiter and scope metadata.

  The stream is the single owner of token storage for one source unit.
  Analysis reads it; edits are recorded by a `Fixer` keyed on token indices.
  """

  def __init__(self, tokens: Iterable[Token]):
    """
    Builds the stream and computes structural metadata.

    Args:
        tokens: Tokens in source order.
    """
    self.tokens: List[Token] = list(tokens)
    self._pair_delimiters()
    self._assign_scopes()

  @classmethod
  def from_source(cls, text: str, lexer: Optional[PhpLexer] = None) -> "TokenStream":
    """
    Tokenizes PHP source and wraps the result in a stream.

    Args:
        text: The PHP source.
        lexer: Optional lexer instance to reuse.

    Returns:
        TokenStream: The decorated stream.
    """
    lexer = lexer or PhpLexer()
    return cls(lexer.tokenize(text))

  def __len__(self) -> int:
    return len(self.tokens)

  def __getitem__(self, index: int) -> Token:
    return self.tokens[index]

  def __iter__(self) -> Iterator[Token]:
    return iter(self.tokens)

  @property
  def source(self) -> str:
    """The original source text."""
    return "".join(t.value for t in self.tokens)

  def first_open_tag(self) -> Optional[int]:
    """Returns the index of the first OPEN_TAG token, if any."""
    return self.find_next([TokenType.OPEN_TAG], 0)

  def find_next(self, kinds: Iterable[TokenType], start: int, end: Optional[int] = None) -> Optional[int]:
    """
    Finds the next token of one of the given kinds.

    Args:
        kinds: Token kinds to look for.
        start: First index to inspect (inclusive).
        end: Last index to inspect (inclusive). Defaults to the end of the stream.

    Returns:
        Optional[int]: The index found, or None.
    """
    wanted = set(kinds)
    stop = len(self.tokens) - 1 if end is None else min(end, len(self.tokens) - 1)
    for i in range(max(start, 0), stop + 1):
      if self.tokens[i].kind in wanted:
        return i
    return None

  def next_significant(self, index: int, end: Optional[int] = None) -> Optional[int]:
    """
    Returns the index of the first non-whitespace, non-comment token after `index`.

    Args:
        index: Position to search from (exclusive).
        end: Last index to inspect (inclusive).
    """
    stop = len(self.tokens) - 1 if end is None else min(end, len(self.tokens) - 1)
    for i in range(index + 1, stop + 1):
      if self.tokens[i].kind not in EMPTY_TOKENS:
        return i
    return None

  def previous_significant(self, index: int, start: int = 0) -> Optional[int]:
    """Returns the index of the closest non-empty token before `index`."""
    for i in range(index - 1, max(start, 0) - 1, -1):
      if self.tokens[i].kind not in EMPTY_TOKENS:
        return i
    return None

  def partner(self, index: int) -> int:
    """
    Returns the index of the delimiter paired with `index`.

    Raises:
        MalformedScopeBoundaryError: If the delimiter is unbalanced.
    """
    pair = self.tokens[index].pair
    if pair is None:
      raise MalformedScopeBoundaryError(index)
    return pair

  def _pair_delimiters(self) -> None:
    """Matches openers and closers using a stack. Unbalanced tokens keep `pair=None`."""
    stack: List[int] = []
    for i, token in enumerate(self.tokens):
      if token.kind in OPENERS:
        stack.append(i)
        continue
      if token.kind not in CLOSERS:
        continue

      # Find the nearest opener this closer can balance; anything above it is left unmatched.
      for depth in range(len(stack) - 1, -1, -1):
        if OPENERS[self.tokens[stack[depth]].kind] == token.kind:
          opener = stack[depth]
          del stack[depth:]
          self.tokens[opener].pair = i
          token.pair = opener
          break

  def _assign_scopes(self) -> None:
    """Classifies `function` keywords and records the bounds of their bodies."""
    for i, token in enumerate(self.tokens):
      if token.kind != TokenType.FUNCTION:
        continue

      nxt = self.next_significant(i)
      # Closures may return by reference: function &() {}
      if nxt is not None and self.tokens[nxt].value == "&":
        nxt = self.next_significant(nxt)
      if nxt is not None and self.tokens[nxt].kind == TokenType.OPEN_PARENTHESIS:
        token.kind = TokenType.CLOSURE

      opener = self._find_body(i + 1)
      if opener is not None:
        token.scope_opener = opener
        token.scope_closer = self.tokens[opener].pair

  def _find_body(self, start: int) -> Optional[int]:
    """
    Locates the `{` opening a routine body, skipping the signature.

    Returns:
        Optional[int]: Index of the brace, or None for a bodiless declaration.
    """
    i = start
    while i < len(self.tokens):
      kind = self.tokens[i].kind
      if kind == TokenType.OPEN_BRACE:
        return i
      if kind == TokenType.SEMICOLON or kind == TokenType.CLOSE_BRACE:
        return None
      if kind in OPENERS:
        pair = self.tokens[i].pair
        if pair is None:
          return None
        i = pair
      i += 1
    return None
