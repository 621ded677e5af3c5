"""
FILE: later/cli/commands/__init__.py
PURPOSE: CLI command modules

Importing a module registers its commands on the apps defined in main.
"""

from . import lists, notes, spaces, system, todos

__all__ = ["lists", "notes", "spaces", "system", "todos"]
