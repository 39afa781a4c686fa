"""Cooperative cancellation for agent runs.

A ``CancellationToken`` is handed to ``AgentRunner.execute`` by the caller
(for example a request handler that notices the client went away). The engine
checks it before starting, and the model call checks it between steps.
"""

from __future__ import annotations

import asyncio
from typing import Optional


class CancellationToken:
    """One-shot cancellation flag that can also be awaited."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Trigger the token; later calls keep the first reason."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    @classmethod
    def already_cancelled(cls, reason: Optional[str] = None) -> "CancellationToken":
        token = cls()
        token.cancel(reason)
        return token

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
