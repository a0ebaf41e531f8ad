"""Bounded search of terminal process trees for a target application.

Each session's shell is the root of an implicit tree that is re-listed
from the OS on every call. The search goes depth first, one branch at a
time, and stops MAX_DEPTH levels below the shell.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from termroute.log_setup import TRACE
from termroute.process_enumerator import ProcessEnumerator

logger = logging.getLogger(__name__)

MAX_DEPTH = 3


class TerminalSession(Protocol):
    """A host-owned terminal that may be running a target application.

    The matcher only reads the root pid and uses the delivery methods; it
    never creates or disposes sessions.
    """

    name: str

    async def get_root_pid(self) -> int | None:
        """Return the pid of the session's shell, or None if unresolved."""
        ...

    def send_text(self, text: str, execute: bool = False) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def dispose(self) -> None: ...


def _word_pattern(target: str) -> re.Pattern[str]:
    # Word boundary before, whitespace or end after, so "git" never
    # matches "mygit" or "github-copilot".
    return re.compile(rf"\b{re.escape(target)}(?:\s|$)")


def matches_command_line(target: str, command_line: str) -> bool:
    """Check whether ``target`` appears as a whole word in a command line.

    Matching is case-sensitive and treats ``target`` literally.

    Args:
        target: Application name to look for, e.g. ``"kiro-cli"``.
        command_line: Full command line of a process.

    Returns:
        True if the name starts at a word boundary and is followed by
        whitespace or the end of the command line.
    """
    return _word_pattern(target).search(command_line) is not None


def _session_label(session: TerminalSession) -> str:
    return str(getattr(session, "name", session))


class TerminalMatcher:
    """Find the terminal session whose process tree runs a target application.

    Each session's descendants are searched depth-first, one branch at a
    time, down to MAX_DEPTH levels below the session's shell. A branch is
    explored completely before its next sibling is enumerated.
    """

    def __init__(self, enumerator: ProcessEnumerator | None = None) -> None:
        """Initialize the matcher.

        Args:
            enumerator: Source of child process listings. A default
                ProcessEnumerator is created when omitted.
        """
        self._enumerator = enumerator or ProcessEnumerator()

    async def find_matching_terminal(
        self, sessions: list[TerminalSession], patterns: list[str]
    ) -> TerminalSession | None:
        """Return the first session with a matching descendant process.

        Sessions are tried strictly in the given order and the first
        match wins. Sessions whose root pid is unavailable are skipped
        without any enumeration.

        Args:
            sessions: Terminal sessions to search, in priority order.
            patterns: Target application names.

        Returns:
            The first matching TerminalSession, or None.
        """
        if not patterns:
            logger.debug("No target applications, skipping terminal search")
            return None

        compiled = [_word_pattern(p) for p in patterns]
        for session in sessions:
            label = _session_label(session)
            try:
                root_pid = await session.get_root_pid()
            except Exception as exc:
                logger.warning("Could not resolve pid for terminal %s: %s", label, exc)
                continue
            # Pid 0 is never a shell; treat it as unresolved.
            if root_pid is None or root_pid <= 0:
                logger.debug("Terminal %s has no pid yet, skipping", label)
                continue
            if await self._tree_has_match(root_pid, compiled, 1):
                logger.debug("Terminal %s (pid %d) runs a target application", label, root_pid)
                return session

        logger.debug("No terminal runs any of %s", patterns)
        return None

    async def _tree_has_match(self, pid: int, patterns: list[re.Pattern[str]], depth: int) -> bool:
        """Search the subtree below ``pid`` for a matching command line.

        Children at this level are all checked before any of them is
        descended into; descent then goes child by child, fully exploring
        each child's bounded subtree before the next.
        """
        if depth > MAX_DEPTH:
            return False

        children = await self._enumerator.get_child_processes(pid)

        for child in children:
            for pattern in patterns:
                if pattern.search(child.command_line):
                    logger.log(
                        TRACE,
                        "Match %r in pid %d at depth %d: %s",
                        pattern.pattern, child.pid, depth, child.command_line,
                    )
                    return True

        for child in children:
            if await self._tree_has_match(child.pid, patterns, depth + 1):
                return True

        return False

    async def deliver(self, session: TerminalSession, text: str) -> bool:
        """Type ``text`` into a session and bring it to the foreground.

        The text is sent without an implicit Enter. Failures raised by the
        session are logged and reported as False so the caller can fall
        back to its default behavior.

        Args:
            session: Target TerminalSession.
            text: Text to send.

        Returns:
            True if the text was sent and the session shown.
        """
        try:
            session.send_text(text, execute=False)
            session.show()
        except Exception as exc:
            logger.warning("Failed to paste to terminal %s: %s", _session_label(session), exc)
            return False
        logger.debug("Delivered %d chars to terminal %s", len(text), _session_label(session))
        return True
