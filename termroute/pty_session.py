from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

import pexpect

from termroute.log_setup import TRACE

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Raised when a PTY session cannot accept input."""

    pass


class PtySession:
    """Terminal session backed by a pexpect-managed PTY.

    Implements the TerminalSession protocol for processes this package
    spawns itself, so a terminal search can run against a real process
    tree without a host editor. A PTY has no window, so show and hide only
    track a visibility flag.
    """

    def __init__(
        self,
        command: str,
        args: list[str],
        cwd: str,
        env: dict[str, str] | None = None,
        name: str | None = None,
    ) -> None:
        """Initialize a PtySession without spawning it.

        Args:
            command: The program to run as the session's root process.
            args: Command-line arguments for the program.
            cwd: Working directory in which to spawn the process.
            env: Extra environment variables, merged on top of the
                current environment. Tilde (~) in values is expanded.
            name: Label used in logs. Defaults to the command.
        """
        self.name = name or command
        self.visible = False
        self._command = command
        self._args = args
        self._cwd = cwd
        self._env = self._build_env(env or {})
        self._process: pexpect.spawn | None = None
        self._buffer: str = ""

    @staticmethod
    def _build_env(extra: dict[str, str]) -> dict[str, str]:
        """Merge extra env vars into a copy of the current environment."""
        merged = os.environ.copy()
        for key, value in extra.items():
            merged[key] = str(Path(value).expanduser()) if "~" in value else value
        return merged

    async def spawn(self) -> None:
        """Spawn the root process in a PTY on a background thread."""
        logger.debug("Spawning session %s: %s %s cwd=%s", self.name, self._command, self._args, self._cwd)
        loop = asyncio.get_running_loop()
        self._process = await loop.run_in_executor(
            None,
            lambda: pexpect.spawn(
                self._command,
                self._args,
                cwd=self._cwd,
                env=self._env,
                encoding="utf-8",
                timeout=5,
            ),
        )
        logger.debug("Session %s spawned pid=%d", self.name, self._process.pid)

    def is_alive(self) -> bool:
        """Check whether the root process has been spawned and is running."""
        if self._process is None:
            return False
        return self._process.isalive()

    async def get_root_pid(self) -> int | None:
        """Return the root process pid, or None before spawn or after exit."""
        if not self.is_alive():
            return None
        return self._process.pid

    def send_text(self, text: str, execute: bool = False) -> None:
        """Write text to the PTY, followed by Enter only if ``execute``.

        Raises:
            SessionError: If the root process is not running.
        """
        if not self.is_alive():
            raise SessionError(f"Session {self.name} is not running")
        logger.log(TRACE, "PTY write to %s: %r", self.name, text[:200])
        self._process.send(text)
        if execute:
            self._process.send("\r")

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def read_available(self) -> str:
        """Drain and return all output currently readable from the PTY.

        Returns:
            Output accumulated since the last read, or an empty string if
            nothing is available or the session was never spawned.
        """
        if self._process is None:
            return ""
        while True:
            try:
                self._buffer += self._process.read_nonblocking(size=4096, timeout=0)
            except (pexpect.TIMEOUT, pexpect.EOF):
                break
        result = self._buffer
        self._buffer = ""
        return result

    def dispose(self) -> None:
        """Force-close the PTY and its root process."""
        if self._process is None:
            return
        logger.debug("Disposing session %s pid=%d", self.name, self._process.pid)
        if self._process.isalive():
            self._process.close(force=True)
