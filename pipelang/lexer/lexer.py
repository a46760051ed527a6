"""
pipelang Lexer - turns source text into a lazy stream of tokens.

The lexer hands out one token per `next_token()` call. It never raises:
anything it cannot make sense of comes back as an ILLEGAL token, and the
parser decides what to do with it.

Statements end at line breaks. Rather than splicing ';' characters into the
buffer, the lexer looks past the whitespace that follows a token that can end
a statement; when it meets a line break first, it records a pending
terminator and emits a synthetic SEMICOLON on the next call.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Union

from .tokens import (
    Token, TokenKind, Span, KEYWORDS, OPERATORS, SIGILS, TWO_CHAR_TRIGGERS,
    TERMINATOR_TRIGGERS, lookup_identifier
)
from .errors import (
    create_illegal_token_error,
    INVALID_CHARACTER, INVALID_NUMBER, UNKNOWN_SIGIL, UNTERMINATED_STRING
)

logger = logging.getLogger(__name__)

# Sentinel for "no character": past the end of the input
EOF_CHAR = ""

WHITESPACE = frozenset("\r\n\t ")
QUOTES = frozenset("\"'")


class Lexer:
    """
    pipelang lexical analyzer.

    Converts a buffer of code points into tokens on demand, tracking the
    offset of every token so later stages can report errors against the
    original text.
    """

    def __init__(self, source: Union[str, Iterable[str]], filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source text, or any iterable of single characters
            filename: Name of the source for error reporting
        """
        self.source = source if isinstance(source, str) else "".join(source)
        self.filename = filename

        self.current_char = EOF_CHAR
        self.current_idx = 0
        self.next_idx = 0

        # Offset of a terminator that must be emitted before scanning resumes
        self._pending_terminator: Optional[int] = None

        self._read_next()

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the first EOF."""
        while True:
            token = self.next_token()
            yield token
            if token.kind == TokenKind.EOF:
                return

    def tokenize(self) -> List[Token]:
        """
        Tokenize the rest of the input.

        Returns:
            List of tokens ending with an EOF token
        """
        return list(self)

    def next_token(self) -> Token:
        """Return the next token, or EOF once the input is exhausted."""
        if self._pending_terminator is not None:
            offset = self._pending_terminator
            self._pending_terminator = None
            return Token(TokenKind.SEMICOLON, ";", Span(offset, offset), synthetic=True)

        self._skip_whitespace()
        token = self._scan_token()

        if token.kind in TERMINATOR_TRIGGERS:
            self._pending_terminator = self._find_line_break()
        elif token.kind == TokenKind.ILLEGAL:
            logger.debug("illegal token %r at %s: %s", token.text, token.span, token.reason)

        return token

    def _scan_token(self) -> Token:
        """Dispatch on the current character."""
        char = self.current_char
        start = self.current_idx

        if char == EOF_CHAR:
            return Token(TokenKind.EOF, "", Span(start, start))

        if char in TWO_CHAR_TRIGGERS:
            return self._read_operator()

        if char in OPERATORS:
            self._read_next()
            return Token(OPERATORS[char], char, Span(start, start + 1))

        if char in QUOTES:
            return self._read_string()

        if char == '$':
            return self._read_sigil()

        if _is_digit(char):
            return self._read_number()

        if _is_letter(char):
            return self._read_identifier()

        self._read_next()
        return self._illegal(start, INVALID_CHARACTER)

    def _read_operator(self) -> Token:
        """Read a two-character operator, falling back to its one-character form."""
        start = self.current_idx
        first = self.current_char
        second = self._peek_char()

        if second != EOF_CHAR and first + second in OPERATORS:
            self._read_next()
            self._read_next()
            return Token(OPERATORS[first + second], first + second, Span(start, start + 2))

        self._read_next()
        kind = TWO_CHAR_TRIGGERS[first]
        if kind is None:
            return self._illegal(start, INVALID_CHARACTER)
        return Token(kind, first, Span(start, start + 1))

    def _read_number(self) -> Token:
        """Read an integer or float; a trailing letter makes the whole run ILLEGAL."""
        start = self.current_idx
        kind = TokenKind.INTEGER
        seen_dot = False

        while _is_digit(self.current_char) or self.current_char == '.':
            if self.current_char == '.':
                # A dot belongs to the number only if a digit follows it
                if seen_dot or not _is_digit(self._peek_char()):
                    break
                seen_dot = True
                kind = TokenKind.FLOAT
            self._read_next()

        if _is_letter(self.current_char):
            while _is_identifier_char(self.current_char):
                self._read_next()
            return self._illegal(start, INVALID_NUMBER)

        return Token(kind, self.source[start:self.current_idx], Span(start, self.current_idx))

    def _read_identifier(self) -> Token:
        """Read an identifier or keyword."""
        start = self.current_idx
        while _is_identifier_char(self.current_char):
            self._read_next()

        text = self.source[start:self.current_idx]
        return Token(lookup_identifier(text), text, Span(start, self.current_idx))

    def _read_sigil(self) -> Token:
        """Read a `$`-prefixed identifier; only the reserved sigils are legal."""
        start = self.current_idx
        self._read_next()  # Skip '$'

        if not _is_letter(self.current_char):
            return self._illegal(start, INVALID_CHARACTER)

        while _is_identifier_char(self.current_char):
            self._read_next()

        text = self.source[start:self.current_idx]
        if text not in SIGILS:
            return self._illegal(start, UNKNOWN_SIGIL)
        return Token(KEYWORDS[text], text, Span(start, self.current_idx))

    def _read_string(self) -> Token:
        """Read a string delimited by matching single or double quotes."""
        start = self.current_idx
        quote = self.current_char
        self._read_next()  # Skip opening quote

        content_start = self.current_idx
        while self.current_char != quote and self.current_char != EOF_CHAR:
            self._read_next()

        if self.current_char == EOF_CHAR:
            return self._illegal(start, UNTERMINATED_STRING)

        text = self.source[content_start:self.current_idx]
        self._read_next()  # Skip closing quote
        return Token(TokenKind.STRING, text, Span(start, self.current_idx))

    def _illegal(self, start: int, reason: str) -> Token:
        """Build an ILLEGAL token covering everything read since start."""
        end = max(self.current_idx, start + 1)
        return Token(TokenKind.ILLEGAL, self.source[start:end], Span(start, end), reason=reason)

    def _find_line_break(self) -> Optional[int]:
        """
        Look through the whitespace after the current position.

        Returns the offset of the first line break ('\\n' or '\\r\\n'), the end
        of input if only whitespace remains, or None if something else comes
        first.
        """
        idx = self.current_idx
        while idx < len(self.source) and self.source[idx] in WHITESPACE:
            char = self.source[idx]
            if char == '\n':
                return idx
            if char == '\r' and idx + 1 < len(self.source) and self.source[idx + 1] == '\n':
                return idx
            idx += 1

        if idx >= len(self.source):
            return len(self.source)
        return None

    def _skip_whitespace(self):
        while self.current_char in WHITESPACE:
            self._read_next()

    def _read_next(self):
        """Advance one character."""
        if self.next_idx >= len(self.source):
            self.current_char = EOF_CHAR
            self.current_idx = len(self.source)
            return
        self.current_char = self.source[self.next_idx]
        self.current_idx = self.next_idx
        self.next_idx += 1

    def _peek_char(self) -> str:
        """Peek at the character after the current one without advancing."""
        if self.next_idx >= len(self.source):
            return EOF_CHAR
        return self.source[self.next_idx]


def _is_letter(char: str) -> bool:
    return ('a' <= char <= 'z') or ('A' <= char <= 'Z')


def _is_digit(char: str) -> bool:
    return '0' <= char <= '9'


def _is_identifier_char(char: str) -> bool:
    return _is_letter(char) or _is_digit(char) or char in ('_', '-')


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        List of tokens

    Raises:
        LexerError: If the source contains an ILLEGAL token
    """
    lexer = Lexer(source, filename)
    tokens = lexer.tokenize()

    for token in tokens:
        if token.kind == TokenKind.ILLEGAL:
            raise create_illegal_token_error(token, lexer.source, filename)

    return tokens


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If the source contains an ILLEGAL token
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath)
