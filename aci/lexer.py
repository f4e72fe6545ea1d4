"""
ACI Lexer
=========
Tokenizes contract source code into a stream of typed tokens.
Handles identifiers, constructor names, type variables, keywords,
string/number literals, operators and comments.

Scan failures are raised as ParseFailure subclasses so that the
interface encoder can translate them into a single error shape.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


# ─────────────────────────────────────────────────────────────
#  Source Positions
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True, order=True)
class Position:
    """A 1-based source position. Orders by line, then column."""
    line: int
    col: int

    def __str__(self) -> str:
        return f"L{self.line}:{self.col}"


# ─────────────────────────────────────────────────────────────
#  Parser Failure Shapes
# ─────────────────────────────────────────────────────────────

class ParseFailure(Exception):
    """Base class for every failure raised while scanning or parsing."""

    def __init__(self, pos: Position, detail: str):
        super().__init__(f"{detail} at line {pos.line}, col {pos.col}")
        self.pos = pos
        self.detail = detail


class ScanError(ParseFailure):
    """The scanner hit input it cannot tokenize."""

    def __init__(self, pos: Position, detail: str = "scan error"):
        super().__init__(pos, detail)


class ScanErrorNoState(ParseFailure):
    """The scanner ran out of input in the middle of a token."""

    def __init__(self, pos: Position, detail: str = "scan error"):
        super().__init__(pos, detail)


# ─────────────────────────────────────────────────────────────
#  Tokens
# ─────────────────────────────────────────────────────────────

class TokenType(Enum):
    """All token types in the contract language."""
    # Names
    IDENTIFIER  = auto()   # foo, x, list
    CON         = auto()   # Foo, Some
    TVAR        = auto()   # 'a

    # Declaration keywords
    KW_CONTRACT = auto()
    KW_TYPE     = auto()
    KW_RECORD   = auto()
    KW_DATATYPE = auto()
    KW_FUNCTION = auto()
    KW_PRIVATE  = auto()
    KW_PUBLIC   = auto()
    KW_STATEFUL = auto()

    # Punctuation
    LPAREN      = auto()   # (
    RPAREN      = auto()   # )
    LBRACKET    = auto()   # [
    RBRACKET    = auto()   # ]
    LBRACE      = auto()   # {
    RBRACE      = auto()   # }
    COMMA       = auto()   # ,
    COLON       = auto()   # :
    EQ          = auto()   # =
    BAR         = auto()   # |
    ARROW       = auto()   # =>
    OPERATOR    = auto()   # any other operator, only ever seen inside bodies

    # Literals
    STRING      = auto()   # "..."
    NUMBER      = auto()   # 42, 0xff

    # Special
    EOF         = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the contract source."""
    type: TokenType
    value: str
    line: int
    col: int

    @property
    def pos(self) -> Position:
        return Position(self.line, self.col)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, L{self.line}:{self.col})"


SINGLE_CHAR_TOKENS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
}

# Longest match first
OPERATORS = (
    "=>", "==", "!=", "=<", ">=", "<=", "::", "++", "&&", "||", "->",
    "=", "|", ":", "+", "-", "*", "/", "<", ">", "!", ".", ";", "^", "%", "@",
)

OPERATOR_TOKENS = {
    "=>": TokenType.ARROW,
    "=": TokenType.EQ,
    "|": TokenType.BAR,
    ":": TokenType.COLON,
}

KEYWORDS = {
    "contract": TokenType.KW_CONTRACT,
    "type": TokenType.KW_TYPE,
    "record": TokenType.KW_RECORD,
    "datatype": TokenType.KW_DATATYPE,
    "function": TokenType.KW_FUNCTION,
    "private": TokenType.KW_PRIVATE,
    "public": TokenType.KW_PUBLIC,
    "stateful": TokenType.KW_STATEFUL,
}


def _is_name_char(ch: str | None) -> bool:
    return ch is not None and (ch.isalnum() or ch in "_'")


class Lexer:
    """
    Tokenizes contract source code.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    Raises ScanError or ScanErrorNoState on input that cannot be tokenized.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1

    def _current(self) -> str | None:
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    def _peek(self, offset: int = 1) -> str | None:
        idx = self.pos + offset
        if idx >= len(self.source):
            return None
        return self.source[idx]

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _here(self) -> Position:
        return Position(self.line, self.col)

    def _skip_whitespace(self):
        while self.pos < len(self.source) and self.source[self.pos] in (" ", "\t", "\r", "\n"):
            self._advance()

    def _skip_line_comment(self):
        while self.pos < len(self.source) and self._current() != "\n":
            self._advance()

    def _skip_block_comment(self):
        """Skip a /* ... */ comment. Block comments nest."""
        start = self._here()
        self._advance()
        self._advance()
        depth = 1
        while depth > 0:
            if self.pos >= len(self.source):
                raise ScanErrorNoState(start)
            if self._current() == "/" and self._peek() == "*":
                self._advance()
                self._advance()
                depth += 1
            elif self._current() == "*" and self._peek() == "/":
                self._advance()
                self._advance()
                depth -= 1
            else:
                self._advance()

    def _read_string(self) -> Token:
        """Read a double-quoted string literal."""
        start_line, start_col = self.line, self.col
        self._advance()  # consume opening "
        chars = []
        while self.pos < len(self.source):
            ch = self._advance()
            if ch == '"':
                return Token(TokenType.STRING, "".join(chars), start_line, start_col)
            if ch == "\n":
                break
            if ch == "\\":
                if self.pos >= len(self.source):
                    break
                next_ch = self._advance()
                escape_map = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}
                chars.append(escape_map.get(next_ch, next_ch))
            else:
                chars.append(ch)
        raise ScanError(Position(start_line, start_col))

    def _read_number(self) -> Token:
        """Read a decimal or 0x-prefixed hexadecimal literal."""
        start_line, start_col = self.line, self.col
        chars = []
        if self._current() == "0" and self._peek() in ("x", "X"):
            chars.append(self._advance())
            chars.append(self._advance())
            while self._current() is not None and self._current() in "0123456789abcdefABCDEF_":
                chars.append(self._advance())
        else:
            while self._current() is not None and (self._current().isdigit() or self._current() == "_"):
                chars.append(self._advance())
        return Token(TokenType.NUMBER, "".join(chars), start_line, start_col)

    def _read_name(self) -> Token:
        """Read an identifier, constructor name or keyword."""
        start_line, start_col = self.line, self.col
        chars = []
        while _is_name_char(self._current()):
            chars.append(self._advance())
        word = "".join(chars)
        if word[0].isupper():
            return Token(TokenType.CON, word, start_line, start_col)
        token_type = KEYWORDS.get(word, TokenType.IDENTIFIER)
        return Token(token_type, word, start_line, start_col)

    def _read_tvar(self) -> Token:
        """Read a type variable: 'a, 'key."""
        start = self._here()
        self._advance()  # consume '
        if not (self._current() is not None and (self._current().isalpha() or self._current() == "_")):
            raise ScanError(start)
        chars = ["'"]
        while _is_name_char(self._current()):
            chars.append(self._advance())
        return Token(TokenType.TVAR, "".join(chars), start.line, start.col)

    def _read_operator(self) -> Token | None:
        for op in OPERATORS:
            if self.source.startswith(op, self.pos):
                line, col = self.line, self.col
                for _ in op:
                    self._advance()
                return Token(OPERATOR_TOKENS.get(op, TokenType.OPERATOR), op, line, col)
        return None

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source into a list of tokens."""
        tokens = list(self._iter_tokens())
        tokens.append(Token(TokenType.EOF, "", self.line, self.col))
        return tokens

    def _iter_tokens(self) -> Iterator[Token]:
        """Generate tokens one at a time."""
        while True:
            self._skip_whitespace()
            ch = self._current()
            if ch is None:
                return

            # Comments
            if ch == "/" and self._peek() == "/":
                self._skip_line_comment()
                continue
            if ch == "/" and self._peek() == "*":
                self._skip_block_comment()
                continue

            if ch == '"':
                yield self._read_string()
                continue

            if ch.isdigit():
                yield self._read_number()
                continue

            if ch == "'":
                yield self._read_tvar()
                continue

            if ch.isalpha() or ch == "_":
                yield self._read_name()
                continue

            if ch in SINGLE_CHAR_TOKENS:
                yield Token(SINGLE_CHAR_TOKENS[ch], ch, self.line, self.col)
                self._advance()
                continue

            token = self._read_operator()
            if token is not None:
                yield token
                continue

            raise ScanError(self._here())
