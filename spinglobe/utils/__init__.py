# spinglobe/utils/__init__.py
"""
Utilities package marker: settings and logging setup.
"""
__all__ = ["settings", "logging_setup"]
