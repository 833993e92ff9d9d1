"""
External classification capability for commentguard.

Defines the probe/initialize/classify interface and an Ollama
implementation over httpx.
"""

from .base import Availability, ClassifierSession, ExternalClassifier, SessionProvider
from .ollama import (
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_OLLAMA_URL,
    DEFAULT_SYSTEM_PROMPT,
    OllamaClassifier,
    OllamaSession,
)

__all__ = [
    "Availability",
    "ClassifierSession",
    "ExternalClassifier",
    "SessionProvider",
    "DEFAULT_OLLAMA_MODEL",
    "DEFAULT_OLLAMA_URL",
    "DEFAULT_SYSTEM_PROMPT",
    "OllamaClassifier",
    "OllamaSession",
]
