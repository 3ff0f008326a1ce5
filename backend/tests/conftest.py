from __future__ import annotations
import os

# Keep the suite away from a developer's .env and database file
os.environ["GEMINI_API_KEY"] = ""
os.environ["DATABASE_URL"] = "sqlite://"

from typing import Any, List, Tuple

import pytest
from fastapi.testclient import TestClient

from edu_research.main import app
from edu_research.prompts import GenerationRequest
from edu_research.state import get_kv_store, get_workspace
from edu_research.storage import CredentialStore, HistoryStore, MemoryKeyValueStore
from edu_research.workspace import Workspace


class FakeGenerator:
	def __init__(self, factory: "FakeFactory") -> None:
		self.factory = factory

	async def generate_document(self, request: GenerationRequest) -> str:
		self.factory.calls.append(("generate", request.topic))
		return await self._outcome()

	async def extend_document(self, prior_text: str, request: GenerationRequest) -> str:
		self.factory.calls.append(("extend", prior_text))
		return await self._outcome()

	async def _outcome(self) -> str:
		outcome = self.factory.outcomes.pop(0)
		if isinstance(outcome, Exception):
			raise outcome
		if callable(outcome):
			return await outcome()
		return outcome

	async def aclose(self) -> None:
		self.factory.closed += 1


class FakeFactory:
	"""Stands in for the Gemini client; each call consumes one scripted outcome."""

	def __init__(self) -> None:
		self.outcomes: List[Any] = []
		self.api_keys: List[str] = []
		self.calls: List[Tuple[str, str]] = []
		self.closed = 0

	def __call__(self, api_key: str) -> FakeGenerator:
		self.api_keys.append(api_key)
		return FakeGenerator(self)


@pytest.fixture
def anyio_backend():
	return "asyncio"


@pytest.fixture
def kv():
	return MemoryKeyValueStore()


@pytest.fixture
def factory():
	return FakeFactory()


@pytest.fixture
def workspace(kv, factory):
	return Workspace(factory, HistoryStore(kv), CredentialStore(kv), history_limit=20)


@pytest.fixture
def request_data():
	return GenerationRequest(topic="أهمية الماء", educational_level="primary", length="short", language="arabic")


@pytest.fixture
def client(kv, workspace):
	app.dependency_overrides[get_kv_store] = lambda: kv
	app.dependency_overrides[get_workspace] = lambda: workspace
	try:
		yield TestClient(app)
	finally:
		app.dependency_overrides.clear()
