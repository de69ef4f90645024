"""Shared test fixtures."""

import copy
import json
from typing import Any, Callable

import httpx
import pytest

from dubdesk.config import Config
from dubdesk.models import DialogueRecord, Role, UserSession
from dubdesk.review import (
    DialogueNavigator,
    QueryCache,
    RemoteSyncClient,
    SyncContext,
    dialogues_key,
)

BASE_URL = "http://api.test/api"

SAMPLE_DOCUMENTS: list[dict[str, Any]] = [
    {
        "_id": {"$oid": "665f0a01"},
        "dialogNumber": "1.1.1.1",
        "subtitleIndex": 1,
        "timeStart": "00:01.000",
        "timeEnd": "00:02.500",
        "characterName": "ALICE",
        "dialogue": {"original": "Hello there", "translated": "Hola", "adapted": "Hola, tú"},
        "videoUrl": "https://cdn.test/clips/1.mp4",
        "recordedAudioUrl": "https://cdn.test/takes/1.wav",
        "status": "pending",
    },
    {
        "_id": {"$oid": "665f0a02"},
        "dialogNumber": "1.1.1.2",
        "subtitleIndex": 2,
        "timeStart": "00:03.000",
        "timeEnd": "00:04.000",
        "characterName": "BOB",
        "dialogue": {"original": "Hi", "translated": "Hola", "adapted": None},
        "videoClipUrl": "https://cdn.test/clips/2.mp4",
        "status": "revision-requested",
    },
    {
        "_id": {"$oid": "665f0a03"},
        "dialogNumber": "1.1.1.3",
        "subtitleIndex": 3,
        "timeStart": 5.25,
        "timeEnd": 6.0,
        "characterName": "ALICE",
        "dialogue": {"original": "Again", "translated": "Otra vez", "adapted": ""},
        "videoUrl": "https://cdn.test/clips/3.mp4",
        "recordedAudioUrl": "https://cdn.test/takes/3.wav",
        "status": "needs-rerecord",
        "voiceId": "voice-1",
    },
    {
        "_id": {"$oid": "665f0a04"},
        "dialogNumber": "1.1.2.4",
        "subtitleIndex": 4,
        "timeStart": "",
        "timeEnd": "",
        "characterName": "alice",
        "dialogue": {"original": "Quiet", "translated": "Silencio", "adapted": "Silencio"},
        "videoUrl": "https://cdn.test/clips/4.mp4",
        "status": "approved",
    },
]

SAMPLE_VOICES: list[dict[str, Any]] = [
    {
        "id": "voice-1",
        "name": "Rachel",
        "category": "premade",
        "labels": {"gender": "female", "accent": "american"},
        "verification": {"required": False, "verified": False},
    },
    {
        "id": "voice-2",
        "name": "Marco",
        "category": "cloned",
        "labels": {"gender": "male", "accent": "italian"},
        "verification": {"required": True, "verified": True},
    },
    {
        "id": "voice-3",
        "name": "Unverified Clone",
        "category": "cloned",
        "labels": {"gender": "male"},
        "verification": {"required": True, "verified": False},
    },
]


class FakeRemote:
    """In-memory persistence, voice and storage APIs behind httpx.MockTransport."""

    def __init__(self, documents: list[dict[str, Any]], voices: list[dict[str, Any]]):
        self.documents = {doc["dialogNumber"]: copy.deepcopy(doc) for doc in documents}
        self.voices = copy.deepcopy(voices)
        self.existing: set[str] = set()
        self.requests: list[httpx.Request] = []
        self.overrides: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def calls(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    def override(
        self,
        method: str,
        path: str,
        responder: Callable[[httpx.Request], httpx.Response],
    ) -> None:
        self.overrides[(method, path)] = responder

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if (request.method, path) in self.overrides:
            return self.overrides[(request.method, path)](request)

        if request.method == "HEAD":
            return httpx.Response(200 if str(request.url) in self.existing else 404)

        if request.method == "GET" and path == "/api/voice-models":
            return httpx.Response(200, json=self.voices)

        if request.method == "POST" and path == "/api/voice-models/speech-to-speech":
            body = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "convertedAudioUrl": body["outputPath"]})

        if request.method == "DELETE" and path.startswith("/api/dialogues/remove-voice/"):
            key = path.rsplit("/", 1)[1]
            doc = self.documents[key]
            doc["voiceId"] = None
            doc["ai_converted_voiceover_url"] = None
            return httpx.Response(200, json={"success": True})

        if request.method == "PATCH" and path.startswith("/api/dialogues/"):
            key = path.rsplit("/", 1)[1]
            if key not in self.documents:
                return httpx.Response(404, json={"error": "Dialogue not found"})
            body = json.loads(request.content)
            for routing in ("projectId", "databaseName", "collectionName", "sceneNumber"):
                body.pop(routing, None)
            if body.pop("deleteVoiceOver", False):
                body.update({"recordedAudioUrl": None, "status": "pending"})
            self.documents[key].update(body)
            return httpx.Response(200, json=self.documents[key])

        return httpx.Response(404, json={"error": f"No route for {request.method} {path}"})

    def client(self) -> RemoteSyncClient:
        transport = httpx.MockTransport(self.handle)
        return RemoteSyncClient(BASE_URL, client=httpx.AsyncClient(transport=transport))


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration with short timers."""
    config = Config()
    config.review.autosave_delay_seconds = 0.05
    config.playback.poll_interval_seconds = 0.01
    config.playback.poll_max_attempts = 3
    config.playback.storage_base_url = "https://storage.test"
    return config


@pytest.fixture
def documents() -> list[dict[str, Any]]:
    """Raw dialogue documents as the persistence API returns them."""
    return copy.deepcopy(SAMPLE_DOCUMENTS)


@pytest.fixture
def voice_documents() -> list[dict[str, Any]]:
    """Voice catalog entries as the voice API returns them."""
    return copy.deepcopy(SAMPLE_VOICES)


@pytest.fixture
def records(documents: list[dict[str, Any]]) -> list[DialogueRecord]:
    return [DialogueRecord.from_document(doc) for doc in documents]


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote(SAMPLE_DOCUMENTS, SAMPLE_VOICES)


@pytest.fixture
def sync_client(remote: FakeRemote) -> RemoteSyncClient:
    return remote.client()


@pytest.fixture
def sync_context() -> SyncContext:
    return SyncContext("proj-1", "studio_db", "episode_1")


@pytest.fixture
def cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def make_navigator(
    records: list[DialogueRecord],
    cache: QueryCache,
) -> Callable[..., DialogueNavigator]:
    """Build a navigator for a role over the sample records."""

    def factory(
        role: Role = Role.TRANSCRIBER,
        items: list[DialogueRecord] | None = None,
    ) -> DialogueNavigator:
        user = UserSession(username="ana", role=role)
        return DialogueNavigator(
            records if items is None else items,
            session=lambda: user,
            cache=cache,
            cache_key=dialogues_key("proj-1"),
        )

    return factory
