import pytest

from termroute.process_enumerator import ProcessRecord


class FakeEnumerator:
    """In-memory process table that records every enumeration call."""

    def __init__(self):
        self.children: dict[int, list[ProcessRecord]] = {}
        self.calls: list[int] = []

    def set_children(self, pid, processes):
        self.children[pid] = [ProcessRecord(pid=p, command_line=c) for p, c in processes]

    async def get_child_processes(self, parent_pid):
        self.calls.append(parent_pid)
        return list(self.children.get(parent_pid, []))


class FakeSession:
    """Terminal session stand-in that records what was sent to it."""

    def __init__(self, name, pid=None):
        self.name = name
        self.pid = pid
        self.sent: list[tuple[str, bool]] = []
        self.shown = False

    async def get_root_pid(self):
        return self.pid

    def send_text(self, text, execute=False):
        self.sent.append((text, execute))

    def show(self):
        self.shown = True

    def hide(self):
        self.shown = False

    def dispose(self):
        pass


@pytest.fixture
def enumerator():
    return FakeEnumerator()


@pytest.fixture
def make_session():
    """Factory for FakeSession(name, pid=None)."""
    return FakeSession
