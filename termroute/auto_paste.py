from __future__ import annotations

import logging

from termroute.config import AppConfig
from termroute.process_enumerator import ProcessEnumerator
from termroute.terminal_matcher import TerminalMatcher

logger = logging.getLogger(__name__)


class AutoPaster:
    """Paste text into the terminal running a configured target application."""

    def __init__(self, config: AppConfig, matcher: TerminalMatcher | None = None) -> None:
        """Initialize the auto-paster.

        Args:
            config: Application configuration supplying target
                applications, enabled platforms and the query timeout.
            matcher: Terminal matcher to use. Built from the config's
                query timeout when omitted.
        """
        self._config = config
        self._matcher = matcher or TerminalMatcher(
            ProcessEnumerator(query_timeout=config.process.query_timeout)
        )

    async def try_auto_paste(self, sessions, text: str) -> bool:
        """Deliver ``text`` to the first session running a target application.

        Returns False without touching any session when auto-paste is
        disabled for this platform or no application is configured. A
        False result tells the caller to fall back to its default
        behavior, such as copying to the clipboard.

        Args:
            sessions: Open terminal sessions, in priority order.
            text: Text to paste.

        Returns:
            True if the text was delivered to a session.
        """
        if not self._config.is_auto_paste_enabled():
            logger.debug("Auto-paste disabled")
            return False

        targets = self._config.auto_paste.target_applications()
        session = await self._matcher.find_matching_terminal(sessions, targets)
        if session is None:
            return False
        return await self._matcher.deliver(session, text)
