# spinglobe/rendering/__init__.py
"""
Drawing surfaces for the globe: the live pygame surface and the offline
matplotlib/SVG exporters.
"""
__all__ = ["globe_surface", "globe_frames"]
