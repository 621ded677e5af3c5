"""
FILE: later/__init__.py
PURPOSE: Later - spaces, notes, todo lists and custom lists in the terminal
"""

__version__ = "0.1.0"
