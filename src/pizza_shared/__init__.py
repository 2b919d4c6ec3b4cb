"""
Shared domain layer of the pizza ordering service.
"""
