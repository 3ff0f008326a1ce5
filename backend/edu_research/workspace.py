"""Application state for one browser session.

Every generate/regenerate/extend call gets a fresh request id. When a call
finishes after a newer one was started (or the document was closed) its
result is dropped instead of overwriting what the user is looking at.
"""
from __future__ import annotations
import itertools
import logging
import uuid
from typing import Awaitable, Callable, List, Optional, Protocol

from pydantic import BaseModel

from .errors import (
	ClassifiedError,
	CredentialMissingError,
	ErrorCategory,
	GenerationError,
	HistoryEntryNotFound,
	NoActiveDocumentError,
	SupersededError,
	classify,
	describe,
)
from .prompts import GeneratedDocument, GenerationRequest
from .storage import CredentialStore, HistoryEntry, HistoryStore

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
	async def generate_document(self, request: GenerationRequest) -> str:
		...

	async def extend_document(self, prior_text: str, request: GenerationRequest) -> str:
		...

	async def aclose(self) -> None:
		...


GeneratorFactory = Callable[[str], TextGenerator]


class WorkspaceState(BaseModel):
	current_request: Optional[GenerationRequest] = None
	current_document: Optional[GeneratedDocument] = None
	error: Optional[ClassifiedError] = None
	is_loading: bool = False


class Workspace:
	def __init__(
		self,
		generator_factory: GeneratorFactory,
		history: HistoryStore,
		credentials: CredentialStore,
		*,
		history_limit: int = 20,
		fallback_api_key: Optional[str] = None,
		locale: str = "ar",
	) -> None:
		self._generator_factory = generator_factory
		self._history = history
		self._credentials = credentials
		self.history_limit = history_limit
		self._fallback_api_key = fallback_api_key
		self.locale = locale
		self._request_ids = itertools.count(1)
		self._active_id = 0
		self.current_request: Optional[GenerationRequest] = None
		self.current_document: Optional[GeneratedDocument] = None
		self.error: Optional[ClassifiedError] = None
		self.is_loading = False

	def snapshot(self) -> WorkspaceState:
		return WorkspaceState(
			current_request=self.current_request,
			current_document=self.current_document,
			error=self.error,
			is_loading=self.is_loading,
		)

	def history(self) -> List[HistoryEntry]:
		return self._history.load()

	def has_credential(self) -> bool:
		return self._resolve_api_key() is not None

	def _resolve_api_key(self) -> Optional[str]:
		return self._credentials.get() or self._fallback_api_key

	async def submit(self, request: GenerationRequest) -> GeneratedDocument:
		return await self._run(request, lambda generator: generator.generate_document(request))

	async def regenerate(self) -> GeneratedDocument:
		if self.current_request is None:
			raise NoActiveDocumentError("nothing to regenerate")
		request = self.current_request
		return await self._run(request, lambda generator: generator.generate_document(request))

	async def extend(self) -> GeneratedDocument:
		if self.current_document is None:
			raise NoActiveDocumentError("nothing to extend")
		prior_text = self.current_document.content
		request = self.current_document.source_request
		return await self._run(request, lambda generator: generator.extend_document(prior_text, request))

	async def _run(
		self,
		request: GenerationRequest,
		call: Callable[[TextGenerator], Awaitable[str]],
	) -> GeneratedDocument:
		self.current_request = request
		api_key = self._resolve_api_key()
		if api_key is None:
			self.error = describe(ErrorCategory.CREDENTIAL_MISSING, self.locale)
			raise CredentialMissingError("no API key configured")

		request_id = next(self._request_ids)
		self._active_id = request_id
		self.is_loading = True
		self.error = None
		logger.info("Generation %s started: topic=%r language=%s", request_id, request.topic, request.language.value)
		generator = self._generator_factory(api_key)
		try:
			text = await call(generator)
		except GenerationError as err:
			if request_id != self._active_id:
				logger.info("Generation %s failed after being superseded", request_id)
				raise SupersededError(f"request {request_id} was superseded") from err
			err.classified = classify(str(err), self.locale)
			self.error = err.classified
			logger.warning("Generation %s failed: category=%s", request_id, err.classified.category.value)
			raise
		finally:
			await generator.aclose()
			if request_id == self._active_id:
				self.is_loading = False

		if request_id != self._active_id:
			logger.info("Dropping response for superseded generation %s", request_id)
			raise SupersededError(f"request {request_id} was superseded")

		document = GeneratedDocument(content=text, source_request=request)
		self.current_document = document
		entry = HistoryEntry.from_generation(uuid.uuid4().hex, text, request, document.generated_at)
		self._history.save([entry, *self._history.load()][: self.history_limit])
		logger.info("Generation %s stored as history entry %s", request_id, entry.id)
		return document

	def clear(self) -> None:
		# Anything still in flight belongs to the closed document
		self._active_id = next(self._request_ids)
		self.current_request = None
		self.current_document = None
		self.error = None
		self.is_loading = False

	def select(self, entry_id: str) -> GeneratedDocument:
		for entry in self._history.load():
			if entry.id == entry_id:
				# A generation still in flight must not replace the chosen entry
				self._active_id = next(self._request_ids)
				self.is_loading = False
				self.current_request = entry.request
				self.current_document = GeneratedDocument(
					content=entry.content,
					source_request=entry.request,
					generated_at=entry.timestamp,
				)
				self.error = None
				return self.current_document
		raise HistoryEntryNotFound(entry_id)

	def delete(self, entry_id: str) -> List[HistoryEntry]:
		entries = self._history.load()
		remaining = [entry for entry in entries if entry.id != entry_id]
		if len(remaining) == len(entries):
			raise HistoryEntryNotFound(entry_id)
		self._history.save(remaining)
		return remaining
