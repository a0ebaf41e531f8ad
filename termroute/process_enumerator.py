"""Immediate child process listing over the platform's own tools.

POSIX systems list every process with ``ps`` and keep the rows whose
parent is the requested pid; Windows asks the CIM process table for the
children directly. Both are reduced to ``<pid>,<text>`` lines before
parsing, where ``<text>`` is the full argument string on POSIX but only
the image name (e.g. ``python.exe``) on Windows.
"""

from __future__ import annotations

import asyncio
import logging
import platform
from dataclasses import dataclass

from termroute.config import DEFAULT_QUERY_TIMEOUT
from termroute.log_setup import TRACE

logger = logging.getLogger(__name__)

POSIX = "posix"
WINDOWS = "windows"

_SYSTEM_FAMILIES = {
    "Linux": POSIX,
    "Darwin": POSIX,
    "Windows": WINDOWS,
}

_PS_COMMAND = ["ps", "-A", "-o", "ppid=,pid=,args="]

_WINDOWS_QUERY = (
    "Get-CimInstance Win32_Process -Filter 'ParentProcessId=%d' | "
    "ForEach-Object { '{0},{1}' -f $_.ProcessId, $_.Name }"
)


class EnumerationError(Exception):
    """Raised internally when an OS process query does not complete cleanly."""

    pass


class QueryTimeoutError(EnumerationError):
    """Raised internally when an OS process query exceeds its timeout."""

    pass


@dataclass(frozen=True)
class ProcessRecord:
    """One OS process as reported by a single enumeration call."""

    pid: int
    command_line: str


def parse_output(stdout: str) -> list[ProcessRecord]:
    """Parse ``<pid>,<text>`` lines into ProcessRecords.

    Blank lines are skipped. The pid is the first comma-separated field;
    every remaining field is rejoined with commas so command lines that
    contain commas survive intact. Lines without a comma or whose pid is
    not a positive integer are dropped.

    Args:
        stdout: Raw reduced output of an enumeration command.

    Returns:
        Records in the order the lines appeared.
    """
    records = []
    for line in stdout.strip().splitlines():
        line = line.strip()
        if not line:
            continue
        pid_field, *rest = line.split(",")
        if not rest:
            logger.log(TRACE, "Dropping line without command: %r", line)
            continue
        try:
            pid = int(pid_field)
        except ValueError:
            logger.log(TRACE, "Dropping line with invalid pid: %r", line)
            continue
        if pid <= 0:
            continue
        records.append(ProcessRecord(pid=pid, command_line=",".join(rest)))
    return records


def reduce_ps_output(stdout: str, parent_pid: int) -> str:
    """Keep the ``ps`` rows whose parent is ``parent_pid``.

    Args:
        stdout: Output of ``ps -A -o ppid=,pid=,args=``.
        parent_pid: Parent process ID to filter on.

    Returns:
        Newline-joined ``<pid>,<args>`` lines.
    """
    lines = []
    for row in stdout.splitlines():
        fields = row.split(None, 2)
        if len(fields) < 3:
            continue
        ppid, pid, args = fields
        try:
            if int(ppid) != parent_pid:
                continue
        except ValueError:
            continue
        lines.append(f"{pid},{args}")
    return "\n".join(lines)


async def _reap(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


async def _run_command(cmd: list[str], timeout: float) -> str:
    """Run a command asynchronously and return its decoded stdout.

    Args:
        cmd: Command and arguments to execute.
        timeout: Seconds to wait before the command is killed.

    The child is killed and reaped if the wait ends early, whether by
    timeout or by cancellation of the calling task.

    Returns:
        Decoded stdout. Undecodable bytes are replaced.

    Raises:
        QueryTimeoutError: If the command outlives ``timeout``.
        EnumerationError: On a non-zero exit status.
        OSError: If the executable cannot be started.
    """
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        await _reap(proc)
        raise QueryTimeoutError(f"{cmd[0]} timed out after {timeout}s")
    except BaseException:
        # Cancelled by the caller: never leave the query running.
        await _reap(proc)
        raise
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip()
        raise EnumerationError(f"{cmd[0]} exited with {proc.returncode}: {detail}")
    return stdout.decode(errors="replace")


class ProcessEnumerator:
    """Stateless lister of a process's immediate children.

    Every call issues a fresh OS query; nothing is cached because the
    process table changes continuously.
    """

    def __init__(self, query_timeout: float = DEFAULT_QUERY_TIMEOUT, system: str | None = None) -> None:
        """Initialize the enumerator.

        Args:
            query_timeout: Seconds allowed for each OS query.
            system: Platform name as reported by ``platform.system()``.
                Detected when omitted.
        """
        self._query_timeout = query_timeout
        self._family = _SYSTEM_FAMILIES.get(system or platform.system())

    @property
    def family(self) -> str | None:
        """Platform family in use, or None when unsupported."""
        return self._family

    async def get_child_processes(self, parent_pid: int) -> list[ProcessRecord]:
        """Return the immediate children of ``parent_pid``.

        A pid that does not exist is a legal input. Any failure of the
        underlying query (tool missing, permission denied, non-zero exit,
        timeout) yields an empty list; this method never raises.

        Args:
            parent_pid: Process ID whose children to list.

        Returns:
            Child records in the order the OS reported them.
        """
        try:
            parent_pid = int(parent_pid)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-integer parent pid %r", parent_pid)
            return []

        try:
            if self._family == POSIX:
                stdout = await _run_command(_PS_COMMAND, self._query_timeout)
                children = parse_output(reduce_ps_output(stdout, parent_pid))
            elif self._family == WINDOWS:
                cmd = [
                    "powershell",
                    "-NoProfile",
                    "-NonInteractive",
                    "-Command",
                    _WINDOWS_QUERY % parent_pid,
                ]
                stdout = await _run_command(cmd, self._query_timeout)
                children = parse_output(stdout)
            else:
                logger.debug("Process enumeration unsupported on %s", platform.system())
                return []
        except QueryTimeoutError as exc:
            logger.warning("Process query for PID %d: %s", parent_pid, exc)
            return []
        except EnumerationError as exc:
            logger.debug("Failed to get child processes for PID %d: %s", parent_pid, exc)
            return []
        except OSError as exc:
            logger.warning("Cannot run process query for PID %d: %s", parent_pid, exc)
            return []
        except Exception as exc:
            logger.warning("Unexpected error listing children of PID %d: %s", parent_pid, exc)
            return []

        logger.log(TRACE, "PID %d has %d children", parent_pid, len(children))
        return children
