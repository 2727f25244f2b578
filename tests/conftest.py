import json
import random

import pytest
import pytest_asyncio

from anonychat.domain.common.errors import ExternalServiceError, PersistenceError
from anonychat.domain.session.registry import SessionRegistry
from anonychat.settings import Settings
from anonychat.store.models import ParticipantStore
from anonychat.transport.protocols import OutMedia


class FakeRepo:
    """In-memory stand-in for RedisRepo. Reads hand out copies, like Redis does."""

    def __init__(self):
        self.users = {}
        self.violations = []
        self.chatlogs = {}
        self.fail_writes = False

    async def get_participant(self, pid):
        p = self.users.get(pid)
        return p.model_copy(deep=True) if p else None

    async def get_or_create_participant(self, pid):
        p = await self.get_participant(pid)
        if p is not None:
            return p
        p = ParticipantStore(pid=pid, nickname=pid.split("@")[0])
        self.users[pid] = p.model_copy(deep=True)
        return p

    async def save_participant(self, p):
        if self.fail_writes:
            raise PersistenceError("write failed")
        self.users[p.pid] = p.model_copy(deep=True)

    async def list_participants(self):
        return [p.model_copy(deep=True) for p in self.users.values()]

    async def append_violation(self, entry):
        if self.fail_writes:
            raise PersistenceError("write failed")
        self.violations.append(entry)

    async def list_violations(self):
        return list(self.violations)

    async def append_transcript(self, room_id, entry):
        if self.fail_writes:
            raise PersistenceError("write failed")
        self.chatlogs.setdefault(room_id, []).append(entry)

    async def read_transcript(self, room_id, start=0, end=-1):
        lines = self.chatlogs.get(room_id, [])
        return list(lines[start:] if end == -1 else lines[start:end + 1])

    async def transcript_exists(self, room_id):
        return room_id in self.chatlogs


class FakeTextGen:
    """Scripted generator: each call pops the next reply (a string or an exception)."""

    def __init__(self):
        self.replies = []
        self.prompts = []

    def queue_question(self, question, answer):
        self.replies.append(json.dumps({"question": question, "answer": answer}))

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if not self.replies:
            return json.dumps({"question": "Ibu kota Indonesia?", "answer": "Jakarta"})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeGateway:
    def __init__(self, fail_for=(), fail_media=False):
        self.sent = []
        self.fail_for = set(fail_for)
        self.fail_media = fail_media

    async def send_text(self, pid, text):
        if pid in self.fail_for:
            raise ExternalServiceError(f"cannot reach {pid}")
        self.sent.append((pid, text))

    async def send(self, event):
        if event.to in self.fail_for or (self.fail_media and isinstance(event, OutMedia)):
            raise ExternalServiceError(f"cannot reach {event.to}")
        self.sent.append((event.to, getattr(event, "text", None) or getattr(event, "media", None)))


class FakeOutbox:
    def __init__(self):
        self.delivered = []

    async def deliver(self, events, *, lane=None):
        for e in events:
            self.delivered.append((lane, e))


class FakeApp:
    def __init__(self, repo, settings=None):
        settings = settings or Settings(QUEUE_TIMEOUT_SEC=60, QUIZ_TIMEOUT_SEC=60)
        rng = random.Random(7)
        self.state = type("State", (), {})()
        self.state.repo = repo
        self.state.settings = settings
        self.state.rng = rng
        self.state.sessions = SessionRegistry()
        self.state.bad_words = frozenset({"contoh", "kasar"})
        self.state.textgen = FakeTextGen()
        self.state.outbox = FakeOutbox()
        self.state.ready = True


@pytest.fixture
def repo():
    return FakeRepo()


@pytest_asyncio.fixture
async def app(repo):
    a = FakeApp(repo)
    yield a
    await a.state.sessions.timers.shutdown()


@pytest.fixture
def gateway():
    return FakeGateway()
