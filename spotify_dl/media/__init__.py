"""
Media Processing Layer.

This package is responsible for writing assembled metadata into audio files.
"""

from .tagger import Tagger

__all__ = ["Tagger"]
