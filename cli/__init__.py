"""
Command-line interface for varset.

Thin bindings that parse arguments, call into the core package and format
the results.
"""

__version__ = "0.1.0"
