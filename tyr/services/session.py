"""Interactive threat-modeling conversation.

Keeps the flat turn list the providers expect, where even positions are
user turns and odd positions are assistant turns.  A turn pair is only
recorded once the provider has answered, so a failed call never leaves
a dangling user turn behind.
"""

from __future__ import annotations

import logging

from tyr.services.analyzer import ThreatAnalyzer

logger = logging.getLogger(__name__)


class ConversationSession:
    """Conversation history bound to one analyzer.

    Context documents are held back and prepended to the next question,
    so the history never contains two user turns in a row.
    """

    def __init__(self, analyzer: ThreatAnalyzer) -> None:
        self._analyzer = analyzer
        self._history: list[str] = []
        self._pending_context: list[str] = []

    @property
    def history(self) -> list[str]:
        return list(self._history)

    @property
    def has_pending_context(self) -> bool:
        return bool(self._pending_context)

    def load_context(self, text: str) -> None:
        """Queue a document (architecture notes, manifest...) for the next turn."""
        self._pending_context.append(text)
        logger.info("Context loaded (%d chars)", len(text))

    def ask(self, query: str) -> str:
        """Send *query* with the current history and record the exchange."""
        turn = "\n\n".join([*self._pending_context, query])
        response = self._analyzer.interactive_query(turn, self.history)
        self._history.extend([turn, response])
        self._pending_context.clear()
        return response

    def clear(self) -> None:
        self._history.clear()
        self._pending_context.clear()
        logger.info("Conversation history cleared.")
