"""
Service layer: one module per domain area, each taking an explicit session.
"""
