"""
Shared Utilities

File I/O and debug plotting used by scripts and tests. Visualization is
imported from its own module so that matplotlib stays optional at runtime.
"""

from album_vision.utils.io import load_image, load_json, save_image, save_json, save_yaml

__all__ = [
    "load_image",
    "save_image",
    "load_json",
    "save_json",
    "save_yaml",
]
