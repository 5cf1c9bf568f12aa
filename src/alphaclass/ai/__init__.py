"""
AI Services

Inference backend for the AlphaClass assistant.
"""

from .client import AIClient, InferenceClient, get_ai_client

__all__ = [
    "AIClient",
    "InferenceClient",
    "get_ai_client",
]
