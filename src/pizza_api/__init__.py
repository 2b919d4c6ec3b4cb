"""
Pizza ordering REST API.
"""
