"""Privacy-preserving completion round trip.

Usage:
    proxy = SecureCompletion(
        anonymizer=Anonymizer(store),
        deanonymizer=Deanonymizer(store),
        client=OpenAICompletionClient(),
    )
    reply = proxy.complete("Write a thank-you note to Juan Pérez")

The prompt is tokenized before it leaves the process and the model's
reply is restored on the way back.  If the upstream call fails the
error propagates and no deanonymization is attempted.
"""

from __future__ import annotations
from dataclasses import dataclass

import structlog

from .anonymizer import Anonymizer
from .deanonymizer import Deanonymizer
from .llm import CompletionClient

logger = structlog.get_logger()

SYSTEM_INSTRUCTION = (
    "You are an assistant that NEVER modifies or rewrites tokens formatted as "
    "{{NAME_********}}, {{EMAIL_********}} or {{PHONE_********}}. Keep those "
    "tokens exactly as they are in your response; do not add or remove "
    "characters inside the braces. Answer the rest normally."
)


@dataclass
class SecureCompletion:
    """Sits between the caller and the text-generation service."""

    anonymizer: Anonymizer
    deanonymizer: Deanonymizer
    client: CompletionClient
    system_instruction: str = SYSTEM_INSTRUCTION

    def complete(self, prompt: str) -> str:
        """Anonymize *prompt*, call the model once, restore its reply."""
        anonymized = self.anonymizer.anonymize(prompt)
        reply = self.client.complete(anonymized.text, self.system_instruction)
        restored = self.deanonymizer.restore(reply)
        logger.info(
            "secure_completion_done",
            model=self.client.model,
            tokens_sent=len(anonymized.token_map),
            tokens_restored=len(restored.restored),
            tokens_unresolved=len(restored.unresolved),
        )
        return restored.text
