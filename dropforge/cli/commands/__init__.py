"""
DropForge CLI Commands Package

Command modules for the DropForge CLI.
"""

__all__ = ['collection', 'registry', 'token']
