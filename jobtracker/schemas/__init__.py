"""
Pydantic schema package.
"""
