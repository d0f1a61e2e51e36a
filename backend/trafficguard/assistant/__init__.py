"""
Assistant Package

AI legal consultant with optional location grounding.
"""

from .legal_assistant import LegalAssistant, WELCOME_MESSAGE, LOCATION_REQUIRED

__all__ = ["LegalAssistant", "WELCOME_MESSAGE", "LOCATION_REQUIRED"]
