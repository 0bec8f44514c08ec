"""
Completion clients for the external text-generation service.

Defines the interface the proxy consumes and an OpenAI implementation.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional

import openai
import structlog
from openai import OpenAI

from .errors import UpstreamError

logger = structlog.get_logger()

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TIMEOUT = 30.0


class CompletionClient(ABC):
    """Abstract base class for text-generation clients."""

    model: str = ""

    @abstractmethod
    def complete(self, text: str, system_instruction: Optional[str] = None) -> str:
        """
        Generate a reply for the given text.

        Args:
            text: The user message
            system_instruction: Optional system message sent before it

        Returns:
            The reply text

        Raises:
            UpstreamError: the service failed, timed out or returned nothing
        """
        pass


class OpenAICompletionClient(CompletionClient):
    """OpenAI chat-completions client.  Single attempt, bounded by ``timeout``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
    ):
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY env var or pass api_key."
            )

        self.model = model or os.getenv("OPENAI_MODEL") or DEFAULT_MODEL
        self.timeout = timeout
        self.temperature = temperature
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    def complete(self, text: str, system_instruction: Optional[str] = None) -> str:
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": text})

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
            )
        except openai.APITimeoutError as e:
            logger.error("upstream_timeout", model=self.model, timeout=self.timeout)
            raise UpstreamError(f"Upstream model timed out after {self.timeout}s") from e
        except openai.OpenAIError as e:
            logger.error("upstream_failed", model=self.model, error=str(e))
            raise UpstreamError(f"Upstream model request failed: {e}") from e

        reply = response.choices[0].message.content if response.choices else None
        if not reply:
            raise UpstreamError("No response from upstream model")
        return reply
