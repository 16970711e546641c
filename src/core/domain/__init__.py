"""Domain models and errors.

Plain, strict data structures (Pydantic v2): no HTTP, CLI or database
drivers here.
"""
