"""
Grammar Parser Package

Exports parser classes for loading grammar definitions.
"""

from .grammar_parser import GrammarParser

__all__ = ["GrammarParser"]
