from __future__ import annotations
from typing import Optional

from fastapi import Depends

from .db import SessionLocal
from .gemini_client import GeminiClient
from .settings import settings
from .storage import CredentialStore, HistoryStore, KeyValueStore, SqlKeyValueStore, ThemeStore
from .workspace import Workspace


_kv_store: Optional[KeyValueStore] = None
_workspace: Optional[Workspace] = None


def get_kv_store() -> KeyValueStore:
	global _kv_store
	if _kv_store is None:
		_kv_store = SqlKeyValueStore(SessionLocal)
	return _kv_store


def get_credentials(kv: KeyValueStore = Depends(get_kv_store)) -> CredentialStore:
	return CredentialStore(kv)


def get_theme_store(kv: KeyValueStore = Depends(get_kv_store)) -> ThemeStore:
	return ThemeStore(kv)


def _gemini_factory(api_key: str) -> GeminiClient:
	return GeminiClient(api_key)


def get_workspace(kv: KeyValueStore = Depends(get_kv_store)) -> Workspace:
	global _workspace
	if _workspace is None:
		_workspace = Workspace(
			_gemini_factory,
			HistoryStore(kv),
			CredentialStore(kv),
			history_limit=settings.history_limit,
			fallback_api_key=settings.gemini_api_key,
			locale=settings.error_locale,
		)
	return _workspace
