"""
DropForge CLI Package

Command line interface for publishing and minting DropForge collections.
"""

from .main import cli

__all__ = ['cli']
