"""
Use Cases

Application layer business logic organized by domain.
"""
