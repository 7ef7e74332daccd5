"""Enums shared by the quiz models and schemas"""

from enum import Enum


class QuestionType(str, Enum):
    """Question kinds, stored by their display value"""
    MULTIPLE_CHOICE = "Multiple Choice"
    TRUE_OR_FALSE = "True or False"
    IDENTIFICATION = "Identification"
