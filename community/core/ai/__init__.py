"""Generative text service client."""

from community.core.ai.generative_client import GeminiClient, GenerativeServiceError

__all__ = ["GeminiClient", "GenerativeServiceError"]
