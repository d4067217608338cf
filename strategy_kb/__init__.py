"""Strategy knowledge base access layer.

Uniform connectors over eight knowledge entity kinds, a quality and
standardization engine, a data-source metadata registry, and the
per-entity analysis heuristics that sit on top of them.
"""

from strategy_kb.knowledge_base import KnowledgeBase

__all__ = ["KnowledgeBase"]

__version__ = "0.1.0"
