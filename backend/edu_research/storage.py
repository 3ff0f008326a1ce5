from __future__ import annotations
import json
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from .models import KeyValueEntry
from .prompts import DocumentLanguage, DocumentLength, EducationalLevel, GenerationRequest

logger = logging.getLogger(__name__)

HISTORY_KEY = "research_history"
CREDENTIAL_KEY = "api_key"
THEME_KEY = "theme"

THEMES = ("light", "dark", "system")


class KeyValueStore(Protocol):
	def get(self, key: str) -> Optional[str]:
		...

	def set(self, key: str, value: str) -> None:
		...

	def delete(self, key: str) -> None:
		...


class MemoryKeyValueStore:
	def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
		self._data: Dict[str, str] = dict(initial or {})

	def get(self, key: str) -> Optional[str]:
		return self._data.get(key)

	def set(self, key: str, value: str) -> None:
		self._data[key] = value

	def delete(self, key: str) -> None:
		self._data.pop(key, None)


class SqlKeyValueStore:
	"""Key-value blobs in the ``kv_entries`` table, one short session per call."""

	def __init__(self, session_factory: Callable[[], Session]) -> None:
		self._session_factory = session_factory

	def get(self, key: str) -> Optional[str]:
		db = self._session_factory()
		try:
			row = db.get(KeyValueEntry, key)
			return row.value if row else None
		finally:
			db.close()

	def set(self, key: str, value: str) -> None:
		db = self._session_factory()
		try:
			row = db.get(KeyValueEntry, key)
			if row is None:
				row = KeyValueEntry(key=key, value=value)
			else:
				row.value = value
			db.add(row)
			db.commit()
		except Exception:
			db.rollback()
			raise
		finally:
			db.close()

	def delete(self, key: str) -> None:
		db = self._session_factory()
		try:
			row = db.get(KeyValueEntry, key)
			if row is not None:
				db.delete(row)
				db.commit()
		finally:
			db.close()


class HistoryEntry(BaseModel):
	id: str
	content: str
	timestamp: datetime
	request: GenerationRequest
	# Denormalized for the history list
	topic: str
	educational_level: EducationalLevel
	length: DocumentLength
	language: DocumentLanguage

	@classmethod
	def from_generation(cls, entry_id: str, content: str, request: GenerationRequest, timestamp: datetime) -> "HistoryEntry":
		return cls(
			id=entry_id,
			content=content,
			timestamp=timestamp,
			request=request,
			topic=request.topic,
			educational_level=request.educational_level,
			length=request.length,
			language=request.language,
		)


class HistoryStore:
	def __init__(self, kv: KeyValueStore, key: str = HISTORY_KEY) -> None:
		self._kv = kv
		self._key = key

	def load(self) -> List[HistoryEntry]:
		raw = self._kv.get(self._key)
		if not raw:
			return []
		try:
			items = json.loads(raw)
		except ValueError:
			logger.warning("Stored history is not valid JSON, starting empty")
			return []
		if not isinstance(items, list):
			return []
		entries: List[HistoryEntry] = []
		for item in items:
			try:
				entries.append(HistoryEntry.model_validate(item))
			except ValidationError:
				logger.warning("Skipping malformed history entry")
		return entries

	def save(self, entries: List[HistoryEntry]) -> None:
		self._kv.set(self._key, json.dumps([entry.model_dump(mode="json") for entry in entries], ensure_ascii=False))


class CredentialStore:
	def __init__(self, kv: KeyValueStore, key: str = CREDENTIAL_KEY) -> None:
		self._kv = kv
		self._key = key

	def get(self) -> Optional[str]:
		value = self._kv.get(self._key)
		return value.strip() if value and value.strip() else None

	def set(self, api_key: str) -> None:
		self._kv.set(self._key, api_key.strip())

	def clear(self) -> None:
		self._kv.delete(self._key)

	def masked(self) -> Optional[str]:
		value = self.get()
		if value is None:
			return None
		if len(value) <= 8:
			return "*" * len(value)
		return f"{value[:4]}{'*' * (len(value) - 8)}{value[-4:]}"


class ThemeStore:
	def __init__(self, kv: KeyValueStore, key: str = THEME_KEY) -> None:
		self._kv = kv
		self._key = key

	def get(self) -> str:
		value = self._kv.get(self._key)
		return value if value in THEMES else "system"

	def set(self, theme: str) -> None:
		if theme not in THEMES:
			raise ValueError(f"theme must be one of {THEMES}")
		self._kv.set(self._key, theme)

	def toggle(self) -> str:
		# light -> dark -> system -> light
		current = self.get()
		following = THEMES[(THEMES.index(current) + 1) % len(THEMES)]
		self.set(following)
		return following
