"""
pipelang Lexer Package

Implements the lexical analyzer (tokenizer) for the pipelang language.

Key Features:
- Lazy, one-token-at-a-time scanning
- Half-open source spans on every token
- Automatic statement terminators at line breaks
- Malformed input reported as ILLEGAL tokens, never as exceptions
"""

from .tokens import Token, TokenKind, Span, SourceLocation
from .lexer import Lexer, tokenize_string, tokenize_file
from .errors import Diagnostic, LexerError, create_illegal_token_error

__all__ = [
    "Lexer",
    "Token",
    "TokenKind",
    "Span",
    "SourceLocation",
    "Diagnostic",
    "LexerError",
    "create_illegal_token_error",
    "tokenize_string",
    "tokenize_file",
]
