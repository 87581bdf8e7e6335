from __future__ import annotations

from typing import Protocol, Sequence

from .model import Recipient


class EmailSender(Protocol):
    def send(self, *, to: Sequence[Recipient], subject: str, html: str) -> str:
        """Send one message and return the provider's message id. Raises ``DependencyError`` on failure."""
        raise NotImplementedError
