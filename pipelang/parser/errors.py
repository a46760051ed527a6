"""
Error handling for the pipelang parser.

Every syntax error carries the offending token and a 1-indexed line:column
location derived from the source buffer, so a driver can print a message
that points at the exact text (or at `EOF`).
"""

from typing import Optional, List, Union

from ..lexer.tokens import Token, TokenKind, SourceLocation
from ..lexer.errors import Diagnostic, create_illegal_token_error as create_lexer_error


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.token = token

    @property
    def location(self) -> SourceLocation:
        return self.diagnostic.location

    @property
    def line(self) -> int:
        return self.diagnostic.location.line

    @property
    def column(self) -> int:
        return self.diagnostic.location.column

    @property
    def category(self) -> Optional[str]:
        """Short description of the error code, e.g. "Unexpected token"."""
        return PARSER_ERROR_CODES.get(self.diagnostic.code)

    def __str__(self) -> str:
        return f"parse error at {self.line}:{self.column}: {self.message}"

    def render(self) -> str:
        """Full diagnostic with location, help text and suggestions."""
        return str(self.diagnostic)


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Expected token not found",
    "P003": "No prefix parse function",
    "P004": "Invalid literal",
    "P005": "Identifier required",
    "P006": "Illegal token",
    "P010": "Unexpected end of input",
}

_MISSING_TOKEN_SUGGESTIONS = {
    TokenKind.RIGHT_PAREN: ["Add a closing parenthesis ')'"],
    TokenKind.RIGHT_BRACE: ["Add a closing brace '}'"],
    TokenKind.LEFT_BRACE: ["Add an opening brace '{' to start a block"],
    TokenKind.COMMA: ["Separate arguments with ','"],
}


def describe_token(token: Token, source: str) -> str:
    """Quote a token's source text, or `EOF` at end of input."""
    if token.kind == TokenKind.EOF:
        return "EOF"
    if token.synthetic:
        return "end of line"
    return token.span.slice(source) or token.text


def _location(token: Token, source: str, filename: str) -> SourceLocation:
    return SourceLocation.from_offset(source, token.span.start, filename)


# Helper functions for creating common parser errors

def create_unexpected_token_error(found: Token, source: str, filename: str = "<input>",
                                  expected: Optional[Union[TokenKind, str]] = None) -> ParseError:
    """Create an error for an unexpected sequence of tokens."""
    text = describe_token(found, source)
    if found.kind == TokenKind.EOF:
        return create_unexpected_eof_error(found, source, filename, expected)

    help_text = None
    suggestions = None
    if expected is not None:
        expected_str = expected.name if isinstance(expected, TokenKind) else expected
        help_text = f"Expected {expected_str}, found {found.kind.name}."
        if isinstance(expected, TokenKind):
            suggestions = _MISSING_TOKEN_SUGGESTIONS.get(expected)

    return ParseError(
        message=f"unexpected sequence: {text}",
        location=_location(found, source, filename),
        token=found,
        code="P001" if expected is None else "P002",
        help_text=help_text,
        suggestions=suggestions
    )


def create_missing_token_error(expected: TokenKind, found: Token, source: str,
                               filename: str = "<input>") -> ParseError:
    """Create an error for a required token that is not next in the input."""
    if found.kind == TokenKind.EOF:
        return create_unexpected_eof_error(found, source, filename, expected)

    return ParseError(
        message=(f"expected next token to be {expected.name}, "
                 f"got {found.kind.name}: {describe_token(found, source)}"),
        location=_location(found, source, filename),
        token=found,
        code="P002",
        help_text=f"Expected {expected.name} here.",
        suggestions=_MISSING_TOKEN_SUGGESTIONS.get(expected)
    )


def create_unexpected_eof_error(found: Token, source: str, filename: str = "<input>",
                                expected: Optional[Union[TokenKind, str]] = None) -> ParseError:
    """Create an error for input that ends mid-construct."""
    help_text = "The parser reached the end of the input"
    if expected is not None:
        expected_str = expected.name if isinstance(expected, TokenKind) else expected
        help_text += f" while expecting {expected_str}"
    suggestions = _MISSING_TOKEN_SUGGESTIONS.get(expected) if isinstance(expected, TokenKind) else None

    return ParseError(
        message="unexpected end of file: EOF",
        location=_location(found, source, filename),
        token=found,
        code="P010",
        help_text=help_text + ".",
        suggestions=suggestions
    )


def create_no_prefix_parser_error(found: Token, source: str,
                                  filename: str = "<input>") -> ParseError:
    """Create an error for a token that cannot start an expression."""
    if found.kind == TokenKind.EOF:
        return create_unexpected_eof_error(found, source, filename, "an expression")

    if found.is_operator:
        help_text = f"Operator '{found.text}' needs a left-hand operand."
    elif found.is_keyword:
        help_text = f"Keyword '{found.text}' cannot start an expression."
    else:
        help_text = f"{found.kind.name} cannot start an expression."

    return ParseError(
        message=(f"no prefix parse function for {found.kind.name}: "
                 f"{describe_token(found, source)}"),
        location=_location(found, source, filename),
        token=found,
        code="P003",
        help_text=help_text
    )


def create_invalid_literal_error(found: Token, literal_kind: str, source: str,
                                 filename: str = "<input>") -> ParseError:
    """Create an error for literal text that fails conversion."""
    return ParseError(
        message=f"parse {literal_kind}: {found.text!r} is not a valid {literal_kind}",
        location=_location(found, source, filename),
        token=found,
        code="P004"
    )


def create_identifier_required_error(found: Token, context: str, source: str,
                                     filename: str = "<input>") -> ParseError:
    """Create an error for a non-identifier where an identifier is required."""
    if found.is_sigil:
        help_text = f"'{found.text}' is a reserved sigil; only a bare identifier can be used as {context}."
    elif found.is_literal and found.kind != TokenKind.IDENTIFIER:
        help_text = f"{found.kind.name.capitalize()} literal cannot be used as {context}."
    else:
        help_text = f"Only a bare identifier can be used as {context}."

    return ParseError(
        message=f"expected an identifier as {context}, found {describe_token(found, source)}",
        location=_location(found, source, filename),
        token=found,
        code="P005",
        help_text=help_text
    )


def create_illegal_token_error(found: Token, source: str,
                               filename: str = "<input>") -> ParseError:
    """Wrap a lexer ILLEGAL token as a parse error."""
    lexer_error = create_lexer_error(found, source, filename)
    lexer_diag = lexer_error.diagnostic
    return ParseError(
        message=f"illegal token: {lexer_diag.message}",
        location=lexer_diag.location,
        token=found,
        code="P006",
        help_text=lexer_diag.help_text,
        suggestions=lexer_diag.suggestions
    )
