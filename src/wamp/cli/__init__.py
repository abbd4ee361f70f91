"""
wamp Command-Line Interface
===========================

- **wamp**: transpile and link wamp source files into one text-format module

The tool is a Click application with built-in help and uniform error
reporting (see wamp.cli.errors).
"""

__all__ = ["wamp"]
