"""
Routes Module

Contains API route definitions.
"""

from . import games

__all__ = ['games']
