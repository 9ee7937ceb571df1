"""
三字母词根形态派生引擎
"""

from morphoforge.pipeline.morphology_engine import MorphologyEngine

__all__ = ["MorphologyEngine"]
