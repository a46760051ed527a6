"""
Parser tests for pipelang.

Tests statement forms, operator precedence, if-expression chains and the
errors raised for malformed input.
"""

import unittest
import sys
import os
import tempfile

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from pipelang.lexer.lexer import Lexer
from pipelang.lexer.tokens import TokenKind, Span
from pipelang.parser.parser import Parser, parse_string, parse_file
from pipelang.parser.errors import ParseError
from pipelang.parser.ast_nodes import (
    ExpressionStatement, AssignStatement, BlockStatement, IntegerLiteral,
    FloatLiteral, StringLiteral, Boolean, Identifier, PrefixExpression,
    InfixExpression, CallExpression, ArrowFunctionExpression, IfExpression
)


class ParserTestCase(unittest.TestCase):

    def parse(self, source: str):
        return parse_string(source, "<test>")

    def parse_expression(self, source: str):
        program = self.parse(source)
        self.assertEqual(len(program.statements), 1)
        statement = program.statements[0]
        self.assertIsInstance(statement, ExpressionStatement)
        return statement.expression

    def assert_parse_error(self, source: str, code: str) -> ParseError:
        with self.assertRaises(ParseError) as context:
            self.parse(source)
        self.assertEqual(context.exception.diagnostic.code, code, str(context.exception))
        return context.exception


class TestPrecedence(ParserTestCase):
    """Operator precedence and associativity."""

    def test_operator_precedence(self):
        cases = [
            ("1 + (2 + 3) * 4", "(1 + ((2 + 3) * 4))"),
            ("a = true || (1 == 2) && false", "a = ((true || (1 == 2)) && false)"),
            ("!a <= -b != c < d > e >= f", "(((!a) <= (-b)) != (((c < d) > e) >= f))"),
            ("a = b == c && d", "a = ((b == c) && d)"),
            ("-a * b", "((-a) * b)"),
            ("!!a", "(!(!a))"),
            ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
            ("a * b / c", "((a * b) / c)"),
            ("a - b - c", "((a - b) - c)"),
            ("1 < 2 == 3 > 4", "((1 < 2) == (3 > 4))"),
            ("a || b && c", "((a || b) && c)"),
            ("-(5 + 5)", "(-(5 + 5))"),
            ("add(1, 2 * 3) + 4", "(add(1, (2 * 3)) + 4)"),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(str(self.parse(source)), expected)

    def test_statements_print_one_per_line(self):
        program = self.parse("a = 1\nb = a + 2\nb")
        self.assertEqual(str(program), "a = 1\nb = (a + 2)\nb")


class TestLiterals(ParserTestCase):
    """Prefix literals and identifiers."""

    def test_integer(self):
        expression = self.parse_expression("1234")
        self.assertIsInstance(expression, IntegerLiteral)
        self.assertEqual(expression.value, 1234)

    def test_largest_integer(self):
        expression = self.parse_expression("9223372036854775807")
        self.assertEqual(expression.value, 2 ** 63 - 1)

    def test_float(self):
        expression = self.parse_expression("1.5")
        self.assertIsInstance(expression, FloatLiteral)
        self.assertEqual(expression.value, 1.5)

    def test_booleans(self):
        for source, value in (("true", True), ("false", False)):
            with self.subTest(source=source):
                expression = self.parse_expression(source)
                self.assertIsInstance(expression, Boolean)
                self.assertIs(expression.value, value)

    def test_strings(self):
        for source in ('"mystring"', "'mystring'"):
            with self.subTest(source=source):
                expression = self.parse_expression(source)
                self.assertIsInstance(expression, StringLiteral)
                self.assertEqual(expression.value, "mystring")
                self.assertEqual(str(expression), '"mystring"')

    def test_identifiers(self):
        for source in ("foo", "my-var_2", "$src", "$dest", "$env", "$var"):
            with self.subTest(source=source):
                expression = self.parse_expression(source)
                self.assertIsInstance(expression, Identifier)
                self.assertEqual(expression.value, source)

    def test_prefix_operators(self):
        expression = self.parse_expression("-15")
        self.assertIsInstance(expression, PrefixExpression)
        self.assertEqual(expression.operator, "-")
        self.assertEqual(expression.right.value, 15)


class TestStatements(ParserTestCase):
    """Statement forms."""

    def test_assignment(self):
        program = self.parse("answer = 42")
        statement = program.statements[0]
        self.assertIsInstance(statement, AssignStatement)
        self.assertEqual(statement.name.value, "answer")
        self.assertEqual(statement.value.value, 42)
        self.assertEqual(statement.token.kind, TokenKind.ASSIGN)

    def test_empty_program(self):
        for source in ("", "   \n\t\n"):
            with self.subTest(source=source):
                program = self.parse(source)
                self.assertEqual(program.statements, [])
                self.assertEqual(str(program), "")

    def test_explicit_semicolons(self):
        program = self.parse("a; b;; c")
        self.assertEqual([str(s) for s in program.statements], ["a", "b", "c"])

    def test_pipe_heads_are_placeholders(self):
        self.assertEqual(self.parse("pipe").statements, [])
        self.assertEqual(self.parse("|").statements, [])
        program = self.parse("x = 1\npipe")
        self.assertEqual(len(program.statements), 1)

    def test_multiline_program(self):
        source = (
            "double = x ~> x * 2\n"
            "total = double(21)\n"
            "if total == 42 {\n"
            "    $dest\n"
            "}\n"
        )
        program = self.parse(source)
        self.assertEqual(len(program.statements), 3)
        self.assertIsInstance(program.statements[0].value, ArrowFunctionExpression)
        self.assertIsInstance(program.statements[1].value, CallExpression)
        self.assertIsInstance(program.statements[2].expression, IfExpression)


class TestFunctions(ParserTestCase):
    """Call and arrow-function expressions."""

    def test_call_with_arguments(self):
        expression = self.parse_expression("add(1, 2 * 3, 4 + 5)")
        self.assertIsInstance(expression, CallExpression)
        self.assertEqual(expression.name.value, "add")
        self.assertEqual(len(expression.arguments), 3)
        self.assertEqual(str(expression), "add(1, (2 * 3), (4 + 5))")

    def test_call_without_arguments(self):
        expression = self.parse_expression("now()")
        self.assertIsInstance(expression, CallExpression)
        self.assertEqual(expression.arguments, [])
        self.assertEqual(expression.span, Span(0, 5))

    def test_call_arguments_across_lines(self):
        expression = self.parse_expression("add(1,\n2)")
        self.assertEqual(len(expression.arguments), 2)

    def test_arrow_function(self):
        expression = self.parse_expression("x ~> x + 1")
        self.assertIsInstance(expression, ArrowFunctionExpression)
        self.assertEqual(expression.param.value, "x")
        self.assertIsInstance(expression.body, InfixExpression)
        self.assertEqual(str(expression), "x ~> (x + 1)")

    def test_arrow_function_assignment(self):
        program = self.parse("f = x ~> x * 2")
        self.assertEqual(str(program), "f = x ~> (x * 2)")

    def test_arrow_function_nests_to_the_right(self):
        expression = self.parse_expression("a ~> b ~> a + b")
        self.assertIsInstance(expression.body, ArrowFunctionExpression)
        self.assertEqual(str(expression), "a ~> b ~> (a + b)")


class TestIfExpressions(ParserTestCase):
    """If / else / else-if chains."""

    def test_if_without_else(self):
        expression = self.parse_expression("if x < y { x }")
        self.assertIsInstance(expression, IfExpression)
        self.assertEqual(str(expression.condition), "(x < y)")
        self.assertEqual(len(expression.consequence.statements), 1)
        self.assertIsNone(expression.alternative)

    def test_if_else(self):
        expression = self.parse_expression("if x { 1 } else { 2 }")
        self.assertIsInstance(expression.alternative, BlockStatement)
        self.assertEqual(str(expression), "if x { 1 } else { 2 }")

    def test_else_if_chain(self):
        expression = self.parse_expression("if true { 1 } else if false { 2 } else { 3 }")
        self.assertIsInstance(expression, IfExpression)

        nested = expression.alternative
        self.assertIsInstance(nested, IfExpression)
        self.assertIs(nested.condition.value, False)

        final = nested.alternative
        self.assertIsInstance(final, BlockStatement)
        self.assertEqual(final.statements[0].expression.value, 3)

    def test_multiline_blocks(self):
        source = (
            "if x < y {\n"
            "    1\n"
            "    2\n"
            "    3\n"
            "} else if y {\n"
            "    4; 5\n"
            "} else {\n"
            "    6\n"
            "    a = 7\n"
            "}\n"
        )
        expression = self.parse_expression(source)
        self.assertEqual(len(expression.consequence.statements), 3)
        self.assertEqual(len(expression.alternative.consequence.statements), 2)
        final = expression.alternative.alternative
        self.assertEqual(len(final.statements), 2)
        self.assertIsInstance(final.statements[1], AssignStatement)

    def test_empty_block(self):
        expression = self.parse_expression("if x {}")
        self.assertEqual(expression.consequence.statements, [])

    def test_if_as_assigned_value(self):
        program = self.parse("a = if b { 1 } else { 2 }\nc = 3")
        self.assertEqual(len(program.statements), 2)
        self.assertIsInstance(program.statements[0].value, IfExpression)

    def test_if_statement_ends_at_line_break(self):
        program = self.parse("if true { 1 }\n-1")
        self.assertEqual(len(program.statements), 2)
        self.assertIsInstance(program.statements[0].expression, IfExpression)
        self.assertEqual(str(program.statements[1]), "(-1)")

    def test_if_statement_followed_by_group(self):
        program = self.parse("if true { 1 } else { 2 }\n(2)")
        self.assertEqual(len(program.statements), 2)
        self.assertEqual(program.statements[1].expression.value, 2)

    def test_if_operand_ends_at_line_break(self):
        program = self.parse("a = 1 + if b { 2 }\n(3)")
        self.assertEqual(len(program.statements), 2)
        self.assertEqual(str(program.statements[1]), "3")


class TestParseErrors(ParserTestCase):
    """Malformed input raises ParseError at the first error."""

    def test_unknown_sigil(self):
        error = self.assert_parse_error("$madeup", "P006")
        self.assertEqual(error.token.kind, TokenKind.ILLEGAL)
        self.assertIn("$madeup", error.message)

    def test_illegal_token_mid_expression(self):
        self.assert_parse_error("1 + @", "P006")
        self.assert_parse_error("f(1, 2abc)", "P006")

    def test_unclosed_block_references_eof(self):
        error = self.assert_parse_error("if true { 1", "P010")
        self.assertIn("EOF", str(error))

    def test_missing_brace_after_condition(self):
        error = self.assert_parse_error("if true 1 }", "P002")
        self.assertIn("LEFT_BRACE", error.message)

    def test_missing_closing_paren(self):
        error = self.assert_parse_error("add(1, 2", "P002")
        self.assertIn("RIGHT_PAREN", error.message)

    def test_unclosed_group(self):
        self.assert_parse_error("(1 + 2", "P002")

    def test_bad_else(self):
        self.assert_parse_error("if x { 1 } else 2", "P002")

    def test_call_requires_identifier(self):
        self.assert_parse_error("1(2)", "P005")
        self.assert_parse_error("f(1)(2)", "P005")

    def test_arrow_requires_identifier_param(self):
        self.assert_parse_error("(a + b) ~> a", "P005")

    def test_sigils_are_not_bindable(self):
        error = self.assert_parse_error("$env(1)", "P005")
        self.assertIn("reserved sigil", error.diagnostic.help_text)
        self.assert_parse_error("$src ~> 1", "P005")
        self.assert_parse_error("$var = 1", "P005")

    def test_help_text_describes_token(self):
        error = self.assert_parse_error("* 2", "P003")
        self.assertEqual(error.diagnostic.help_text, "Operator '*' needs a left-hand operand.")
        self.assertEqual(error.category, "No prefix parse function")

        error = self.assert_parse_error("null", "P003")
        self.assertEqual(error.diagnostic.help_text, "Keyword 'null' cannot start an expression.")

        error = self.assert_parse_error("1(2)", "P005")
        self.assertEqual(error.diagnostic.help_text, "Integer literal cannot be used as a function name.")
        self.assertEqual(error.category, "Identifier required")

    def test_assignment_target_must_be_identifier(self):
        self.assert_parse_error("1 = 2", "P005")
        self.assert_parse_error("a + b = 3", "P005")

    def test_integer_overflow(self):
        self.assert_parse_error("9223372036854775808", "P004")

    def test_no_prefix_parser(self):
        error = self.assert_parse_error("null", "P003")
        self.assertIn("NULL", error.message)
        self.assert_parse_error("* 2", "P003")

    def test_trailing_operator(self):
        self.assert_parse_error("1 +", "P010")

    def test_error_location(self):
        error = self.assert_parse_error("a = 1\nb = )", "P003")
        self.assertEqual((error.line, error.column), (2, 5))
        self.assertEqual(str(error), "parse error at 2:5: no prefix parse function for RIGHT_PAREN: )")
        self.assertIn("<test>:2:5", error.render())

    def test_error_is_recorded(self):
        parser = Parser(Lexer("if x {"))
        with self.assertRaises(ParseError) as context:
            parser.parse_program()
        self.assertEqual(parser.errors, [context.exception])

    def test_no_errors_on_success(self):
        parser = Parser(Lexer("a = 1"))
        parser.parse_program()
        self.assertEqual(parser.errors, [])


class TestParseFile(unittest.TestCase):
    """File convenience function."""

    def test_parse_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".pl", delete=False, encoding="utf-8") as f:
            f.write("x = 1\ny = x + 1\n")
            path = f.name
        try:
            program = parse_file(path)
        finally:
            os.unlink(path)
        self.assertEqual(str(program), "x = 1\ny = (x + 1)")

    def test_parse_file_error_names_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".pl", delete=False, encoding="utf-8") as f:
            f.write("x = (1\n")
            path = f.name
        try:
            with self.assertRaises(ParseError) as context:
                parse_file(path)
        finally:
            os.unlink(path)
        self.assertEqual(context.exception.location.filename, path)


if __name__ == '__main__':
    unittest.main()
