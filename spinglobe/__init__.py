# spinglobe/__init__.py
"""
Top-level package marker for spinglobe.

Having an __init__ here ensures imports like
`from spinglobe.core.projection import project` work consistently for the
CLI, the pygame app and the test runner alike.
"""
__all__ = ["core", "rendering", "utils", "app"]
