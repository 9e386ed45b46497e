"""
Query translation: argument scanning, substitutions, and translation units.
"""

from .substitutions import Substitutions
from .translator import MODIFIERS, Translator, translate
from .unit import Literal, Parameter, Segment, TranslationUnit

__all__ = [
    "Literal",
    "MODIFIERS",
    "Parameter",
    "Segment",
    "Substitutions",
    "TranslationUnit",
    "Translator",
    "translate",
]
