"""
Grammar Nodes Package

Exports the predicate node classes that make up an expression tree.
"""

from .predicate import Predicate, TerminalNode, ConjunctionNode

__all__ = ["Predicate", "TerminalNode", "ConjunctionNode"]
