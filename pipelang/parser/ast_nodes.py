"""
Abstract Syntax Tree node definitions for pipelang.

Each node keeps the token(s) it was built from, so its source span can be
derived at any time: a leaf spans its token, a composite node spans from its
first child to its last. Nodes own their children exclusively and are not
modified after construction.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Any, Union
from enum import Enum

from ..lexer.tokens import Span, Token


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"

    # Statements
    EXPRESSION_STMT = "ExpressionStatement"
    BLOCK_STATEMENT = "BlockStatement"
    ASSIGN_STATEMENT = "AssignStatement"

    # Literals
    INTEGER_LITERAL = "IntegerLiteral"
    FLOAT_LITERAL = "FloatLiteral"
    STRING_LITERAL = "StringLiteral"
    BOOLEAN = "Boolean"
    IDENTIFIER = "Identifier"

    # Expressions
    ARROW_FUNCTION = "ArrowFunctionExpression"
    CALL_EXPRESSION = "CallExpression"
    IF_EXPRESSION = "IfExpression"
    PREFIX_EXPRESSION = "PrefixExpression"
    INFIX_EXPRESSION = "InfixExpression"


class ASTVisitor:
    """
    Base visitor for traversing AST nodes.

    `visit` dispatches to `visit_<ClassName>` when the subclass defines it,
    and to `generic_visit` (which visits every child) otherwise.
    """

    def visit(self, node: 'ASTNode') -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: 'ASTNode') -> Any:
        for child in node.children():
            self.visit(child)
        return None


class ASTNode(ABC):
    """Base class for all AST nodes."""

    node_type: ASTNodeType

    def __init__(self, token: Optional[Token]):
        self.token = token

    @property
    @abstractmethod
    def span(self) -> Span:
        """Source span covered by this node."""

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes, in source order."""

    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    def walk(self):
        """Yield this node and all of its descendants, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(span={self.span})"


class Statement(ASTNode):
    """Base class for statements."""
    pass


class Expression(ASTNode):
    """Base class for expressions."""
    pass


# ============================================================================
# Top-level nodes
# ============================================================================

class Program(ASTNode):
    """Root AST node representing a complete source unit."""
    node_type = ASTNodeType.PROGRAM

    def __init__(self, statements: List[Statement]):
        super().__init__(None)
        self.statements = statements

    @property
    def span(self) -> Span:
        if not self.statements:
            return Span(0, 0)
        return Span(self.statements[0].span.start, self.statements[-1].span.end)

    def children(self) -> List[ASTNode]:
        return list(self.statements)

    def __str__(self) -> str:
        return "\n".join(str(stmt) for stmt in self.statements)


# ============================================================================
# Statements
# ============================================================================

class ExpressionStatement(Statement):
    """An expression used as a statement."""
    node_type = ASTNodeType.EXPRESSION_STMT

    def __init__(self, token: Token, expression: Expression):
        super().__init__(token)
        self.expression = expression

    @property
    def span(self) -> Span:
        return self.token.span.cover(self.expression.span)

    def children(self) -> List[ASTNode]:
        return [self.expression]

    def __str__(self) -> str:
        return str(self.expression)


class BlockStatement(Statement):
    """Brace-delimited block of statements."""
    node_type = ASTNodeType.BLOCK_STATEMENT

    def __init__(self, open_token: Token, statements: List[Statement], close_token: Token):
        super().__init__(open_token)
        self.statements = statements
        self.close_token = close_token

    @property
    def open_token(self) -> Token:
        return self.token

    @property
    def span(self) -> Span:
        return Span(self.token.span.start, self.close_token.span.end)

    def children(self) -> List[ASTNode]:
        return list(self.statements)

    def __str__(self) -> str:
        return "\n".join(str(stmt) for stmt in self.statements)


class AssignStatement(Statement):
    """`name = value`; the token is the `=` operator."""
    node_type = ASTNodeType.ASSIGN_STATEMENT

    def __init__(self, token: Token, name: 'Identifier', value: Expression):
        super().__init__(token)
        self.name = name
        self.value = value

    @property
    def span(self) -> Span:
        return Span(self.name.span.start, self.value.span.end)

    def children(self) -> List[ASTNode]:
        return [self.name, self.value]

    def __str__(self) -> str:
        return f"{self.name} = {self.value}"


# ============================================================================
# Literals
# ============================================================================

class Leaf(Expression):
    """Expression built from a single token; spans exactly that token."""

    def __init__(self, token: Token, value: Any):
        super().__init__(token)
        self.value = value

    @property
    def span(self) -> Span:
        return self.token.span

    def children(self) -> List[ASTNode]:
        return []

    def __str__(self) -> str:
        return self.token.text


class IntegerLiteral(Leaf):
    node_type = ASTNodeType.INTEGER_LITERAL
    value: int


class FloatLiteral(Leaf):
    node_type = ASTNodeType.FLOAT_LITERAL
    value: float


class Identifier(Leaf):
    """Plain or sigil identifier; `value` is its name."""
    node_type = ASTNodeType.IDENTIFIER
    value: str


class Boolean(Leaf):
    node_type = ASTNodeType.BOOLEAN
    value: bool


class StringLiteral(Leaf):
    """String literal; `value` excludes the quotes."""
    node_type = ASTNodeType.STRING_LITERAL
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'


# ============================================================================
# Expressions
# ============================================================================

class ArrowFunctionExpression(Expression):
    """`param ~> body`; the token is the `~>` operator."""
    node_type = ASTNodeType.ARROW_FUNCTION

    def __init__(self, token: Token, param: Identifier, body: Expression):
        super().__init__(token)
        self.param = param
        self.body = body

    @property
    def span(self) -> Span:
        return Span(self.param.span.start, self.body.span.end)

    def children(self) -> List[ASTNode]:
        return [self.param, self.body]

    def __str__(self) -> str:
        return f"{self.param} ~> {self.body}"


class CallExpression(Expression):
    """`name(arg, ...)`; the token is the opening parenthesis."""
    node_type = ASTNodeType.CALL_EXPRESSION

    def __init__(self, token: Token, name: Identifier, arguments: List[Expression],
                 close_token: Token):
        super().__init__(token)
        self.name = name
        self.arguments = arguments
        self.close_token = close_token

    @property
    def span(self) -> Span:
        return Span(self.name.span.start, self.close_token.span.end)

    def children(self) -> List[ASTNode]:
        return [self.name, *self.arguments]

    def __str__(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.name}({args})"


class IfExpression(Expression):
    """
    `if condition { ... }` with an optional alternative.

    The alternative is either a BlockStatement (`else { ... }`) or a nested
    IfExpression (`else if ...`), or None when there is no `else`.
    """
    node_type = ASTNodeType.IF_EXPRESSION

    def __init__(self, token: Token, condition: Expression, consequence: BlockStatement,
                 alternative: Optional['Alternative'] = None):
        super().__init__(token)
        self.condition = condition
        self.consequence = consequence
        self.alternative = alternative

    @property
    def span(self) -> Span:
        last = self.alternative if self.alternative is not None else self.consequence
        return Span(self.token.span.start, last.span.end)

    def children(self) -> List[ASTNode]:
        children: List[ASTNode] = [self.condition, self.consequence]
        if self.alternative is not None:
            children.append(self.alternative)
        return children

    def __str__(self) -> str:
        result = f"if {self.condition} {{ {self.consequence} }}"
        if isinstance(self.alternative, IfExpression):
            result += f" else {self.alternative}"
        elif isinstance(self.alternative, BlockStatement):
            result += f" else {{ {self.alternative} }}"
        return result


# An if-expression's alternative: `else { ... }` or `else if ...`
Alternative = Union[BlockStatement, IfExpression]


class PrefixExpression(Expression):
    """Unary `-x` or `!x`; the token is the operator."""
    node_type = ASTNodeType.PREFIX_EXPRESSION

    def __init__(self, token: Token, operator: str, right: Expression):
        super().__init__(token)
        self.operator = operator
        self.right = right

    @property
    def span(self) -> Span:
        return Span(self.token.span.start, self.right.span.end)

    def children(self) -> List[ASTNode]:
        return [self.right]

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


class InfixExpression(Expression):
    """Binary operation; the token is the operator."""
    node_type = ASTNodeType.INFIX_EXPRESSION

    def __init__(self, token: Token, left: Expression, operator: str, right: Expression):
        super().__init__(token)
        self.left = left
        self.operator = operator
        self.right = right

    @property
    def span(self) -> Span:
        return Span(self.left.span.start, self.right.span.end)

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"
