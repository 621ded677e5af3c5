"""
FILE: later/core/__init__.py
PURPOSE: Domain models, storage, ordering and business logic
"""
