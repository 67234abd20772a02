"""
spotify-dl: resolve Spotify URIs and links into tracks and assemble the
metadata used to name and tag them.
"""

__version__ = "0.5.0"
