"""
pipelang Parser Package

Implements a Pratt-based recursive descent parser for the pipelang language.
Produces Abstract Syntax Trees whose nodes all carry their source spans.

Key Features:
- Top-down operator precedence (Pratt parsing)
- Right-nested `else if` chains
- First error halts parsing with a line:column diagnostic
"""

from .ast_nodes import *
from .parser import Parser, Precedence, parse_string, parse_file
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser", "Precedence", "parse_string", "parse_file",

    # AST nodes
    "ASTNode", "ASTNodeType", "ASTVisitor",
    "Program", "Statement", "Expression",
    "ExpressionStatement", "BlockStatement", "AssignStatement",
    "IntegerLiteral", "FloatLiteral", "StringLiteral", "Boolean", "Identifier",
    "ArrowFunctionExpression", "CallExpression", "IfExpression",
    "PrefixExpression", "InfixExpression", "Alternative",

    # Error handling
    "ParseError",
]
