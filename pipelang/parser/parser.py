"""
pipelang Pratt Parser Implementation

Top-down operator precedence (Pratt) parser for pipelang. The parser pulls
tokens from the lexer two at a time (current + peek), dispatches on the
current token kind to a prefix handler and on the peek token kind to an
infix handler, and stops at the first syntax error.

Convention: every parse method is entered with its first token current and
returns with its last token current.
"""

import logging
from typing import List, Optional, Dict, Callable, Tuple
from enum import IntEnum

from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenKind
from .ast_nodes import (
    Program, Statement, Expression, ExpressionStatement, BlockStatement,
    AssignStatement, IntegerLiteral, FloatLiteral, Identifier, Boolean,
    StringLiteral, ArrowFunctionExpression, CallExpression, IfExpression,
    PrefixExpression, InfixExpression, Alternative
)
from .errors import (
    ParseError, create_unexpected_token_error, create_missing_token_error,
    create_unexpected_eof_error, create_no_prefix_parser_error,
    create_invalid_literal_error, create_identifier_required_error,
    create_illegal_token_error
)

logger = logging.getLogger(__name__)

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


class Precedence(IntEnum):
    """Operator precedence levels for Pratt parsing."""
    LOWEST = 1
    ARROW = 2           # ~>
    ASSIGN = 3          # =
    LOGIC = 4           # && ||
    EQUALITY = 5        # == !=
    COMPARISON = 6      # < <= > >=
    SUM = 7             # + -
    PRODUCT = 8         # * /
    PREFIX = 9          # -x !x
    CHAIN_CALL_IDX = 10  # a.b  f()  a[i]


class Parser:
    """
    pipelang Pratt parser.

    Single use: build one per lexer and call `parse_program()` once.
    """

    def __init__(self, lexer: Lexer):
        """
        Initialize parser with a lexer.

        Args:
            lexer: Lexer positioned at the start of the source
        """
        self.lexer = lexer
        self.source = lexer.source
        self.filename = lexer.filename
        self.errors: List[ParseError] = []

        self.current_token: Optional[Token] = None
        self.peek_token: Optional[Token] = None

        self._init_parsing_tables()

        # Load current and peek
        self._shift()
        self._shift()

    def _init_parsing_tables(self):
        """Initialize operator precedence and parsing function tables."""

        # Prefix parsing functions (tokens that can start expressions)
        self.prefix_parsers: Dict[TokenKind, Callable[[], Expression]] = {
            # Literals
            TokenKind.INTEGER: self._parse_integer_literal,
            TokenKind.FLOAT: self._parse_float_literal,
            TokenKind.TRUE: self._parse_boolean,
            TokenKind.FALSE: self._parse_boolean,
            TokenKind.STRING: self._parse_string_literal,

            # Identifiers, including the runtime sigils
            TokenKind.IDENTIFIER: self._parse_identifier,
            TokenKind.SRC: self._parse_identifier,
            TokenKind.DEST: self._parse_identifier,
            TokenKind.ENV: self._parse_identifier,
            TokenKind.VAR: self._parse_identifier,

            # Unary operators
            TokenKind.MINUS: self._parse_prefix_expression,
            TokenKind.LOGICAL_NOT: self._parse_prefix_expression,

            # Grouping and control flow
            TokenKind.LEFT_PAREN: self._parse_grouped_expression,
            TokenKind.IF: self._parse_if_expression,
        }

        # Infix parsing functions (binary operators and calls)
        self.infix_parsers: Dict[TokenKind, Callable[[Expression], Expression]] = {
            # Arithmetic operators
            TokenKind.PLUS: self._parse_infix_expression,
            TokenKind.MINUS: self._parse_infix_expression,
            TokenKind.MULTIPLY: self._parse_infix_expression,
            TokenKind.DIVIDE: self._parse_infix_expression,

            # Comparison operators
            TokenKind.EQUAL: self._parse_infix_expression,
            TokenKind.NOT_EQUAL: self._parse_infix_expression,
            TokenKind.LESS_THAN: self._parse_infix_expression,
            TokenKind.LESS_EQUAL: self._parse_infix_expression,
            TokenKind.GREATER_THAN: self._parse_infix_expression,
            TokenKind.GREATER_EQUAL: self._parse_infix_expression,

            # Logical operators
            TokenKind.LOGICAL_AND: self._parse_infix_expression,
            TokenKind.LOGICAL_OR: self._parse_infix_expression,

            # Assignment is a statement; reaching it here is an error
            TokenKind.ASSIGN: self._parse_misplaced_assignment,

            # Functions
            TokenKind.ARROW: self._parse_arrow_function_expression,
            TokenKind.LEFT_PAREN: self._parse_call_expression,
        }

        # Operator precedence table
        self.precedences: Dict[TokenKind, Precedence] = {
            TokenKind.ARROW: Precedence.ARROW,
            TokenKind.ASSIGN: Precedence.ASSIGN,

            TokenKind.LOGICAL_AND: Precedence.LOGIC,
            TokenKind.LOGICAL_OR: Precedence.LOGIC,

            TokenKind.EQUAL: Precedence.EQUALITY,
            TokenKind.NOT_EQUAL: Precedence.EQUALITY,

            TokenKind.LESS_THAN: Precedence.COMPARISON,
            TokenKind.LESS_EQUAL: Precedence.COMPARISON,
            TokenKind.GREATER_THAN: Precedence.COMPARISON,
            TokenKind.GREATER_EQUAL: Precedence.COMPARISON,

            TokenKind.PLUS: Precedence.SUM,
            TokenKind.MINUS: Precedence.SUM,

            TokenKind.MULTIPLY: Precedence.PRODUCT,
            TokenKind.DIVIDE: Precedence.PRODUCT,

            # Dot access and indexing bind here but have no handlers yet
            TokenKind.LEFT_PAREN: Precedence.CHAIN_CALL_IDX,
            TokenKind.DOT: Precedence.CHAIN_CALL_IDX,
            TokenKind.LEFT_BRACKET: Precedence.CHAIN_CALL_IDX,
        }

    def parse_program(self) -> Program:
        """
        Parse the token stream into an AST.

        Returns:
            Program AST node holding the statements in source order

        Raises:
            ParseError: On the first syntax error; nothing parsed so far is kept
        """
        if self._current_is(TokenKind.ILLEGAL):
            raise self._fail(create_illegal_token_error(self.current_token, self.source, self.filename))

        statements: List[Statement] = []
        while not self._current_is(TokenKind.EOF):
            statement = self._parse_statement()
            if statement is not None:
                statements.append(statement)
            self._advance()

        return Program(statements)

    # Statements

    def _parse_statement(self) -> Optional[Statement]:
        """Parse one statement; None for empty statements and placeholders."""
        kind = self.current_token.kind

        if kind == TokenKind.IDENTIFIER and self._peek_is(TokenKind.ASSIGN):
            return self._parse_assign_statement()

        if kind in (TokenKind.PIPEDEF, TokenKind.PIPE):
            # Pipeline definitions and invocations are not implemented yet
            logger.debug("skipping %s statement head at %s", kind.name, self.current_token.span)
            return None

        if kind == TokenKind.SEMICOLON:
            return None

        return self._parse_expression_statement()

    def _parse_assign_statement(self) -> AssignStatement:
        """Parse `name = value`."""
        name = Identifier(self.current_token, self.current_token.text)
        self._advance()
        assign_token = self.current_token

        self._advance()
        value = self._parse_expression(Precedence.LOWEST)

        if self._peek_is(TokenKind.SEMICOLON):
            self._advance()

        return AssignStatement(assign_token, name, value)

    def _parse_expression_statement(self) -> ExpressionStatement:
        """Parse an expression followed by an optional terminator."""
        token = self.current_token
        expression = self._parse_expression(Precedence.LOWEST)

        if self._peek_is(TokenKind.SEMICOLON):
            self._advance()

        return ExpressionStatement(token, expression)

    def _parse_block_statement(self) -> BlockStatement:
        """Parse `{ statements }`; the opening brace is current."""
        open_token = self.current_token
        statements: List[Statement] = []
        self._advance()

        while not self._current_is(TokenKind.RIGHT_BRACE) and not self._current_is(TokenKind.EOF):
            statement = self._parse_statement()
            if statement is not None:
                statements.append(statement)
            self._advance()

        if self._current_is(TokenKind.EOF):
            raise self._fail(create_unexpected_eof_error(
                self.current_token, self.source, self.filename, TokenKind.RIGHT_BRACE
            ))

        return BlockStatement(open_token, statements, self.current_token)

    # Expressions

    def _parse_expression(self, precedence: Precedence) -> Expression:
        """Parse expression binding tighter than the given precedence."""
        prefix_parser = self.prefix_parsers.get(self.current_token.kind)
        if prefix_parser is None:
            raise self._fail(create_no_prefix_parser_error(self.current_token, self.source, self.filename))

        left = prefix_parser()

        while precedence < self._peek_precedence():
            # An if-expression ends its statement once it has taken the terminator
            if self._current_is(TokenKind.SEMICOLON):
                return left
            infix_parser = self.infix_parsers.get(self.peek_token.kind)
            if infix_parser is None:
                return left
            self._advance()
            left = infix_parser(left)

        return left

    def _peek_precedence(self) -> Precedence:
        return self.precedences.get(self.peek_token.kind, Precedence.LOWEST)

    # Prefix parsers (tokens that can start expressions)

    def _parse_integer_literal(self) -> IntegerLiteral:
        token = self.current_token
        try:
            value = int(token.text, 10)
        except ValueError:
            raise self._fail(create_invalid_literal_error(token, "integer", self.source, self.filename))
        if not INT64_MIN <= value <= INT64_MAX:
            raise self._fail(create_invalid_literal_error(token, "64-bit integer", self.source, self.filename))
        return IntegerLiteral(token, value)

    def _parse_float_literal(self) -> FloatLiteral:
        token = self.current_token
        try:
            value = float(token.text)
        except ValueError:
            raise self._fail(create_invalid_literal_error(token, "float", self.source, self.filename))
        return FloatLiteral(token, value)

    def _parse_boolean(self) -> Boolean:
        token = self.current_token
        if token.text == "true":
            return Boolean(token, True)
        if token.text == "false":
            return Boolean(token, False)
        raise self._fail(create_invalid_literal_error(token, "boolean", self.source, self.filename))

    def _parse_identifier(self) -> Identifier:
        return Identifier(self.current_token, self.current_token.text)

    def _parse_string_literal(self) -> StringLiteral:
        return StringLiteral(self.current_token, self.current_token.text)

    def _parse_grouped_expression(self) -> Expression:
        """Parse parenthesized expression."""
        self._advance()  # Consume (
        expression = self._parse_expression(Precedence.LOWEST)
        self._expect_peek(TokenKind.RIGHT_PAREN)
        return expression

    def _parse_prefix_expression(self) -> PrefixExpression:
        """Parse unary `-x` or `!x`."""
        operator_token = self.current_token
        self._advance()
        right = self._parse_expression(Precedence.PREFIX)
        return PrefixExpression(operator_token, operator_token.text, right)

    def _parse_if_expression(self) -> IfExpression:
        """
        Parse `if cond { ... }` with optional `else { ... }` / `else if ...`.

        The alternative of an `else if` is the nested IfExpression, so chains
        nest to the right.
        """
        if_token = self.current_token

        self._advance()
        condition = self._parse_expression(Precedence.LOWEST)

        self._expect_peek(TokenKind.LEFT_BRACE)
        consequence = self._parse_block_statement()

        alternative: Optional[Alternative] = None
        if self._peek_is(TokenKind.ELSE):
            self._advance()
            self._advance()

            if self._current_is(TokenKind.IF):
                alternative = self._parse_if_expression()
            elif self._current_is(TokenKind.LEFT_BRACE):
                alternative = self._parse_block_statement()
            else:
                raise self._fail(create_unexpected_token_error(
                    self.current_token, self.source, self.filename, "'if' or '{' after 'else'"
                ))

        if self._peek_is(TokenKind.SEMICOLON):
            self._advance()

        return IfExpression(if_token, condition, consequence, alternative)

    # Infix parsers (binary operators and calls)

    def _parse_infix_expression(self, left: Expression) -> InfixExpression:
        """Parse left-associative binary operation."""
        operator_token = self.current_token
        precedence = self.precedences.get(operator_token.kind, Precedence.LOWEST)

        self._advance()
        right = self._parse_expression(precedence)

        return InfixExpression(operator_token, left, operator_token.text, right)

    def _parse_call_expression(self, left: Expression) -> CallExpression:
        """Parse `name(args)`; the opening parenthesis is current."""
        open_token = self.current_token
        if not _is_bare_identifier(left):
            raise self._fail(create_identifier_required_error(
                left.token, "a function name", self.source, self.filename
            ))

        arguments, close_token = self._parse_expression_list(TokenKind.RIGHT_PAREN)
        return CallExpression(open_token, left, arguments, close_token)

    def _parse_arrow_function_expression(self, left: Expression) -> ArrowFunctionExpression:
        """Parse `param ~> body`."""
        arrow_token = self.current_token
        if not _is_bare_identifier(left):
            raise self._fail(create_identifier_required_error(
                left.token, "an arrow function parameter", self.source, self.filename
            ))

        self._advance()
        body = self._parse_expression(Precedence.LOWEST)
        return ArrowFunctionExpression(arrow_token, left, body)

    def _parse_misplaced_assignment(self, left: Expression) -> Expression:
        """`=` inside an expression: only `identifier = value` statements are allowed."""
        raise self._fail(create_identifier_required_error(
            left.token, "the assignment target", self.source, self.filename
        ))

    def _parse_expression_list(self, end: TokenKind) -> Tuple[List[Expression], Token]:
        """
        Parse comma-separated expressions up to the `end` token.

        Entered on the opening delimiter, returns on the closing one.
        """
        if self._peek_is(end):
            self._advance()
            return [], self.current_token

        self._advance()
        expressions = [self._parse_expression(Precedence.LOWEST)]

        while self._peek_is(TokenKind.COMMA):
            self._advance()  # Now on ','
            self._advance()  # Skip to next entry
            expressions.append(self._parse_expression(Precedence.LOWEST))

        close_token = self._expect_peek(end)
        return expressions, close_token

    # Utility methods

    def _shift(self):
        """Move peek into current and pull the next token from the lexer."""
        self.current_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def _advance(self) -> Token:
        """Consume the current token; an ILLEGAL token becoming current is fatal."""
        self._shift()
        if self._current_is(TokenKind.ILLEGAL):
            raise self._fail(create_illegal_token_error(self.current_token, self.source, self.filename))
        return self.current_token

    def _current_is(self, kind: TokenKind) -> bool:
        return self.current_token.kind == kind

    def _peek_is(self, kind: TokenKind) -> bool:
        return self.peek_token.kind == kind

    def _expect_peek(self, kind: TokenKind) -> Token:
        """Advance onto the peek token if it has the given kind, else fail."""
        if self._peek_is(kind):
            return self._advance()
        if self._peek_is(TokenKind.ILLEGAL):
            raise self._fail(create_illegal_token_error(self.peek_token, self.source, self.filename))
        raise self._fail(create_missing_token_error(
            kind, self.peek_token, self.source, self.filename
        ))

    def _fail(self, error: ParseError) -> ParseError:
        """Record an error so it can be raised by the caller."""
        self.errors.append(error)
        logger.debug("%s", error)
        return error


def _is_bare_identifier(node: Expression) -> bool:
    """Plain identifiers only; sigils are runtime-bound and not bindable."""
    return isinstance(node, Identifier) and node.token.kind == TokenKind.IDENTIFIER


def parse_string(source: str, filename: str = "<string>") -> Program:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        Program AST node

    Raises:
        ParseError: If parsing fails
    """
    parser = Parser(Lexer(source, filename))
    return parser.parse_program()


def parse_file(filepath: str) -> Program:
    """
    Convenience function to parse a source file.

    Raises:
        ParseError: If parsing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath)
