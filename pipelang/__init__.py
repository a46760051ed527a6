"""
pipelang Front End Package

Source-to-AST front end for pipelang, a small expression and pipeline
oriented language.

Architecture:
    pipelang/
    ├── lexer/           # Tokenization and terminator insertion
    └── parser/          # Pratt parser and AST nodes

License: MIT
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .lexer import Lexer
from .parser import Parser, parse_string, parse_file

__all__ = [
    # Core classes
    "Lexer",
    "Parser",

    # Convenience functions
    "parse_string",
    "parse_file",

    # Version info
    "__version__",
]
