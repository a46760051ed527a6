"""
Token definitions for the pipelang lexer.

This module defines all token kinds supported by pipelang, including:
- Literals (identifiers, strings, integers, floats)
- Sigil identifiers bound by the runtime ($src, $dest, $env, $var)
- Operators and delimiters
- Keywords

Every token carries the half-open source span it was read from, so the
parser and any later stage can point back at the exact source text.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Iterable, Optional


class TokenKind(Enum):
    """
    Enumeration of all token kinds in pipelang.

    Organized by category, same as the keyword/operator tables below.
    """

    # ========================================================================
    # Literals
    # ========================================================================
    IDENTIFIER = auto()             # myVar, some-name, x_1
    STRING = auto()                 # "text", 'text'
    INTEGER = auto()                # 42
    FLOAT = auto()                  # 3.14

    # ========================================================================
    # Sigil identifiers (runtime-bound variables)
    # ========================================================================
    SRC = auto()                    # $src
    DEST = auto()                   # $dest
    ENV = auto()                    # $env
    VAR = auto()                    # $var

    # ========================================================================
    # Operators
    # ========================================================================
    ASSIGN = auto()                 # =
    PLUS = auto()                   # +
    MINUS = auto()                  # -
    MULTIPLY = auto()               # *
    DIVIDE = auto()                 # /
    LOGICAL_NOT = auto()            # !

    EQUAL = auto()                  # ==
    NOT_EQUAL = auto()              # !=
    LESS_THAN = auto()              # <
    LESS_EQUAL = auto()             # <=
    GREATER_THAN = auto()           # >
    GREATER_EQUAL = auto()          # >=

    LOGICAL_AND = auto()            # &&
    LOGICAL_OR = auto()             # ||
    ARROW = auto()                  # ~> (arrow function)

    # ========================================================================
    # Punctuation and Delimiters
    # ========================================================================
    DOT = auto()                    # .
    COMMA = auto()                  # ,
    COLON = auto()                  # :
    SEMICOLON = auto()              # ; (explicit or inserted at line breaks)
    LEFT_BRACKET = auto()           # [
    RIGHT_BRACKET = auto()          # ]
    LEFT_BRACE = auto()             # {
    RIGHT_BRACE = auto()            # }
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    PIPE = auto()                   # | (pipe invocation)

    # ========================================================================
    # Keywords
    # ========================================================================
    PIPEDEF = auto()                # pipe
    IF = auto()                     # if
    ELSE = auto()                   # else
    NULL = auto()                   # null
    TRUE = auto()                   # true
    FALSE = auto()                  # false

    # ========================================================================
    # Meta
    # ========================================================================
    ILLEGAL = auto()                # unrecognized character or malformed literal
    EOF = auto()                    # end of input


@dataclass(frozen=True)
class Span:
    """Half-open [start, end) range of code-point offsets into the source."""
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"

    def slice(self, source: str) -> str:
        """Return the source text covered by this span."""
        return source[self.start:self.end]

    def cover(self, other: "Span") -> "Span":
        """Return the smallest span that contains both spans."""
        return Span(min(self.start, other.start), max(self.end, other.end))


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting. Line and column are 1-indexed.
    """
    filename: str
    line: int
    column: int
    offset: int  # Code-point offset from start of input

    @classmethod
    def from_offset(cls, source: Iterable[str], offset: int,
                    filename: str = "<input>") -> "SourceLocation":
        """
        Derive line and column by rescanning the source up to offset.

        Every '\\n' before the offset starts a new line.
        """
        line = 1
        column = 1
        for index, char in enumerate(source):
            if index >= offset:
                break
            if char == '\n':
                line += 1
                column = 1
            else:
                column += 1
        return cls(filename, line, column, offset)

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the pipelang language.

    `text` reproduces the source slice at `span`, except for STRING tokens
    (quotes are stripped from `text` but covered by `span`) and synthetic
    terminators inserted by the lexer at line breaks.
    """
    kind: TokenKind
    text: str
    span: Span
    reason: Optional[str] = None    # Why an ILLEGAL token was rejected
    synthetic: bool = False         # Inserted by the lexer, not read from source

    def __str__(self) -> str:
        if self.kind == TokenKind.EOF:
            return "EOF"
        return f"{self.kind.name}({self.text!r})"

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, {self.span})"

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    @property
    def is_literal(self) -> bool:
        """Check if this token is a literal value."""
        return self.kind in LITERAL_KINDS

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword or sigil identifier."""
        return self.kind in KEYWORD_KINDS

    @property
    def is_operator(self) -> bool:
        """Check if this token is an operator."""
        return self.kind in OPERATOR_KINDS

    @property
    def is_sigil(self) -> bool:
        return self.kind in SIGIL_KINDS


# Lookup tables used by the lexer for keyword/operator recognition

SIGILS = {
    "$src": TokenKind.SRC,
    "$dest": TokenKind.DEST,
    "$env": TokenKind.ENV,
    "$var": TokenKind.VAR,
}

KEYWORDS = {
    "pipe": TokenKind.PIPEDEF,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "null": TokenKind.NULL,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    **SIGILS,
}

OPERATORS = {
    # Arithmetic and assignment
    "=": TokenKind.ASSIGN,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.MULTIPLY,
    "/": TokenKind.DIVIDE,
    "!": TokenKind.LOGICAL_NOT,

    # Comparison
    "==": TokenKind.EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<": TokenKind.LESS_THAN,
    "<=": TokenKind.LESS_EQUAL,
    ">": TokenKind.GREATER_THAN,
    ">=": TokenKind.GREATER_EQUAL,

    # Logical
    "&&": TokenKind.LOGICAL_AND,
    "||": TokenKind.LOGICAL_OR,

    # Arrow function
    "~>": TokenKind.ARROW,

    # Punctuation
    ".": TokenKind.DOT,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
    ";": TokenKind.SEMICOLON,
    "[": TokenKind.LEFT_BRACKET,
    "]": TokenKind.RIGHT_BRACKET,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "|": TokenKind.PIPE,
}

# Characters that may start a two-character operator, mapped to the
# one-character kind emitted when the second character does not confirm.
# '&' and '~' have no one-character form.
TWO_CHAR_TRIGGERS = {
    "=": TokenKind.ASSIGN,
    "!": TokenKind.LOGICAL_NOT,
    "<": TokenKind.LESS_THAN,
    ">": TokenKind.GREATER_THAN,
    "&": None,
    "|": TokenKind.PIPE,
    "~": None,
}

LITERAL_KINDS = frozenset({
    TokenKind.IDENTIFIER, TokenKind.STRING, TokenKind.INTEGER, TokenKind.FLOAT,
    TokenKind.TRUE, TokenKind.FALSE, TokenKind.NULL,
})

SIGIL_KINDS = frozenset(SIGILS.values())

KEYWORD_KINDS = frozenset(KEYWORDS.values())

OPERATOR_KINDS = frozenset({
    TokenKind.ASSIGN, TokenKind.PLUS, TokenKind.MINUS, TokenKind.MULTIPLY,
    TokenKind.DIVIDE, TokenKind.LOGICAL_NOT, TokenKind.EQUAL, TokenKind.NOT_EQUAL,
    TokenKind.LESS_THAN, TokenKind.LESS_EQUAL, TokenKind.GREATER_THAN,
    TokenKind.GREATER_EQUAL, TokenKind.LOGICAL_AND, TokenKind.LOGICAL_OR,
    TokenKind.ARROW,
})

# Tokens after which a line break ends the statement
TERMINATOR_TRIGGERS = frozenset({
    TokenKind.IDENTIFIER, TokenKind.STRING, TokenKind.INTEGER, TokenKind.FLOAT,
    TokenKind.TRUE, TokenKind.FALSE, TokenKind.NULL,
    TokenKind.RIGHT_PAREN, TokenKind.RIGHT_BRACKET, TokenKind.RIGHT_BRACE,
}) | SIGIL_KINDS


def lookup_identifier(text: str) -> TokenKind:
    """Classify identifier text as a keyword, sigil, or plain identifier."""
    return KEYWORDS.get(text, TokenKind.IDENTIFIER)
