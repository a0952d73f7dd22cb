"""
Generation Service Abstract Base Class

A generation service turns a prompt into text. Implementations raise
``ServiceOverloadedError`` for transient overload so callers can retry, and
let every other error propagate.
"""

from abc import ABC, abstractmethod


class BaseGenerationService(ABC):
    """Abstract base class for generative-text services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generate text for ``prompt``.

        Raises:
            ServiceOverloadedError: the model is temporarily overloaded
        """

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    async def aclose(self) -> None:
        return None
