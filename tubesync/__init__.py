"""
tubesync - mirrors recent YouTube channel uploads into a local media library.
"""

__version__ = "1.0.0"
