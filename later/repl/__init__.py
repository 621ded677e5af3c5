"""
FILE: later/repl/__init__.py
PURPOSE: Interactive session over spaces and their collections
EXPORTS:
  - main() (from repl.main)
DEPENDENCIES:
  - prompt_toolkit (prompt, completion, toolbar)
  - rich (output)
NOTES:
  - Views are backed by controllers, so a failed command keeps the last loaded data
"""

from .main import main

__all__ = ["main"]
