#!/usr/bin/env python3
"""
Main test runner for the pipelang front end.

Runs a lex/parse smoke check over a sample program, then the unittest
suites under tests/.
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


SAMPLE_PROGRAM = """
double = x ~> x * 2
limit = 10
if $env == 'prod' && limit > 0 {
    $dest
} else if limit == 0 {
    double(limit)
} else {
    'empty'
}
"""


def run_smoke_check():
    """Lex and parse the sample program, printing what each stage produced."""

    print("🚀 pipelang Front End Test Suite")
    print("=" * 60)

    try:
        from pipelang.lexer.lexer import Lexer
        from pipelang.parser.parser import Parser
        from pipelang.parser.errors import ParseError

        print("✅ All front end modules imported successfully")
        print()

    except ImportError as e:
        print(f"❌ Failed to import front end modules: {e}")
        return False

    print("Testing lex/parse pipeline...")
    try:
        print("  🔧 Lexing...")
        tokens = Lexer(SAMPLE_PROGRAM).tokenize()
        print(f"     Generated {len(tokens)} tokens")

        print("  🔧 Parsing...")
        program = Parser(Lexer(SAMPLE_PROGRAM)).parse_program()
        print(f"     Generated AST with {len(program.statements)} statements")

    except ParseError as e:
        print(f"❌ Parse pipeline test FAILED:\n{e.render()}")
        return False

    print()
    print("Parsed program:")
    print("-" * 40)
    print(str(program))
    print("-" * 40)
    print()

    print("  ❌ Testing error handling...")
    try:
        Parser(Lexer("if true { 1")).parse_program()
        print("     ❌ Error handling test failed: expected a parse error")
        return False
    except ParseError as e:
        print(f"     ✅ Error handling successful: {e}")

    print()
    return True


def run_unit_tests():
    """Discover and run the unittest suites."""
    suite = unittest.defaultTestLoader.discover(os.path.join(project_root, "tests"))
    result = unittest.TextTestRunner(verbosity=1).run(suite)
    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_smoke_check() and run_unit_tests()
    sys.exit(0 if success else 1)
