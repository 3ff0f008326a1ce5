from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional
from .errors import CredentialMissingError, GenerationError
from .prompts import GenerationRequest, InstructionPair, build_extend_instructions, build_instructions
from .settings import settings

logger = logging.getLogger(__name__)


class GeminiClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		if not self.api_key:
			raise CredentialMissingError("Gemini API key is not configured")
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		# timeout=None leaves the deadline to the backend
		self._client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds, transport=transport)

	async def generate(self, instructions: InstructionPair) -> str:
		payload: Dict[str, Any] = {
			"systemInstruction": {"parts": [{"text": instructions.system}]},
			"contents": [{"role": "user", "parts": [{"text": instructions.user}]}],
			"generationConfig": {"temperature": settings.gemini_temperature},
		}
		return await self._post_payload(payload)

	async def generate_document(self, request: GenerationRequest) -> str:
		return await self.generate(build_instructions(request))

	async def extend_document(self, prior_text: str, request: GenerationRequest) -> str:
		return await self.generate(build_extend_instructions(prior_text, request))

	async def _post_payload(self, payload: Dict[str, Any]) -> str:
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			status = http_err.response.status_code
			logger.warning("Gemini returned HTTP %s for model %s", status, self.model)
			raise GenerationError(
				f"Gemini request failed with status {status}: {http_err.response.text}",
				status_code=status,
			) from http_err
		except httpx.RequestError as net_err:
			logger.warning("Gemini request could not be completed: %s", type(net_err).__name__)
			raise GenerationError(f"{type(net_err).__name__}: {net_err}") from net_err
		return self._extract_text(r)

	@staticmethod
	def _extract_text(r: httpx.Response) -> str:
		try:
			data = r.json()
		except ValueError as err:
			raise GenerationError(f"Unexpected Gemini response: {r.text}") from err
		if not isinstance(data, dict):
			raise GenerationError(f"Unexpected Gemini response: {r.text}")
		block_reason = (data.get("promptFeedback") or {}).get("blockReason")
		if block_reason:
			raise GenerationError(f"Gemini blocked the prompt: {block_reason}")
		try:
			candidate = data["candidates"][0]
			parts = candidate["content"]["parts"]
		except (KeyError, IndexError, TypeError) as err:
			finish = None
			if isinstance(data.get("candidates"), list) and data["candidates"] and isinstance(data["candidates"][0], dict):
				finish = data["candidates"][0].get("finishReason")
			if finish == "SAFETY":
				raise GenerationError("Gemini response blocked by safety filter") from err
			raise GenerationError(f"Unexpected Gemini response: {r.text}") from err
		text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
		if not text.strip():
			raise GenerationError(f"Gemini returned an empty response: {r.text}")
		return text

	async def aclose(self) -> None:
		await self._client.aclose()
