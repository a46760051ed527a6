"""
Error reporting for the pipelang lexer.

The lexer itself never raises: malformed input comes back as ILLEGAL tokens.
This module turns those tokens into diagnostics with source locations and
correction suggestions, for the parser or any other consumer to report.
"""

from typing import Optional, List
from dataclasses import dataclass

from .tokens import SourceLocation, Token, TokenKind, SIGILS, TWO_CHAR_TRIGGERS


@dataclass
class Diagnostic:
    """A single error or warning attached to a source location."""
    message: str
    location: SourceLocation
    severity: str  # "error", "warning"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        result = f"{severity_prefix}: {self.message}\n"
        result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class LexerError(Exception):
    """
    Describes an ILLEGAL token produced by the lexer.

    Not raised by the lexer; built on demand by consumers that want to report
    a malformed token (see `create_illegal_token_error`).
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

    def __str__(self) -> str:
        return str(self.diagnostic)


def suggest_sigil_corrections(invalid_sigil: str) -> List[str]:
    """Suggest reserved sigils close to a rejected `$name`."""
    suggestions = []
    for sigil in SIGILS:
        if _edit_distance(invalid_sigil.lower(), sigil) <= 2:
            suggestions.append(sigil)
    return sorted(suggestions, key=lambda s: _edit_distance(invalid_sigil.lower(), s))


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein distance between two strings."""
    if len(s1) < len(s2):
        return _edit_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


# Reasons attached to ILLEGAL tokens, keyed by error code
ERROR_CODES = {
    "L001": "invalid character",
    "L002": "unterminated string literal",
    "L003": "invalid numeric literal",
    "L004": "unknown sigil identifier",
}

INVALID_CHARACTER = ERROR_CODES["L001"]
UNTERMINATED_STRING = ERROR_CODES["L002"]
INVALID_NUMBER = ERROR_CODES["L003"]
UNKNOWN_SIGIL = ERROR_CODES["L004"]

_CODES_BY_REASON = {reason: code for code, reason in ERROR_CODES.items()}


def create_illegal_token_error(token: Token, source: str,
                               filename: str = "<input>") -> LexerError:
    """Create a diagnostic for an ILLEGAL token."""
    if token.kind != TokenKind.ILLEGAL:
        raise ValueError(f"expected an ILLEGAL token, got {token.kind.name}")

    reason = token.reason or INVALID_CHARACTER
    location = SourceLocation.from_offset(source, token.span.start, filename)
    help_text = None
    suggestions: List[str] = []

    if reason == UNTERMINATED_STRING:
        quote = token.text[:1]
        help_text = f"String literals must be closed with a matching {quote} quote."
        suggestions = [f"Add a closing {quote} quote"]
    elif reason == UNKNOWN_SIGIL:
        help_text = f"Only {', '.join(SIGILS)} may start with '$'."
        suggestions = [f"Did you mean '{s}'?" for s in suggest_sigil_corrections(token.text)]
    elif reason == INVALID_NUMBER:
        help_text = "Identifiers must start with a letter; numbers cannot be followed by letters."
    elif token.text in TWO_CHAR_TRIGGERS:
        help_text = f"'{token.text}' is only valid as part of a two-character operator."
        suggestions = [op for op in ("&&", "~>") if op.startswith(token.text)]
    elif token.text.isprintable():
        help_text = f"The character '{token.text}' is not valid in pipelang source code."
    else:
        help_text = f"Non-printable character (Unicode: U+{ord(token.text[0]):04X}) is not allowed."

    return LexerError(
        message=f"{reason}: {token.text}",
        location=location,
        token=token,
        code=_CODES_BY_REASON.get(reason),
        help_text=help_text,
        suggestions=suggestions or None
    )
