import json

import httpx
import pytest

from edu_research.errors import CredentialMissingError, ErrorCategory, GenerationError, detect_category
from edu_research.gemini_client import GeminiClient
from edu_research.prompts import GenerationRequest, InstructionPair

pytestmark = pytest.mark.anyio


def ok_response(text):
	return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def make_client(handler):
	return GeminiClient("test-key", model="gemini-test", transport=httpx.MockTransport(handler))


def test_missing_key_raises():
	with pytest.raises(CredentialMissingError):
		GeminiClient()


async def test_generate_posts_instruction_pair():
	seen = {}

	def handler(request):
		seen["url"] = request.url
		seen["body"] = json.loads(request.content)
		return ok_response("## Result")

	client = make_client(handler)
	try:
		text = await client.generate(InstructionPair(system="be a teacher", user="write about water"))
	finally:
		await client.aclose()
	assert text == "## Result"
	assert seen["url"].path.endswith("/models/gemini-test:generateContent")
	assert seen["url"].params["key"] == "test-key"
	body = seen["body"]
	assert body["systemInstruction"]["parts"][0]["text"] == "be a teacher"
	assert body["contents"][0]["role"] == "user"
	assert body["contents"][0]["parts"][0]["text"] == "write about water"
	assert body["generationConfig"]["temperature"] == pytest.approx(0.7)


async def test_generate_and_extend_document_build_prompts():
	users = []

	def handler(request):
		users.append(json.loads(request.content)["contents"][0]["parts"][0]["text"])
		return ok_response("done")

	client = make_client(handler)
	request = GenerationRequest(topic="Volcanoes", language="french")
	try:
		await client.generate_document(request)
		await client.extend_document("## Old text", request)
	finally:
		await client.aclose()
	assert "Topic: [Volcanoes]" in users[0]
	assert "## Old text" in users[1]


async def test_multiple_parts_are_joined():
	def handler(request):
		return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]})

	client = make_client(handler)
	try:
		assert await client.generate(InstructionPair(system="s", user="u")) == "ab"
	finally:
		await client.aclose()


@pytest.mark.parametrize(
	"status,body,category",
	[
		(400, {"error": {"message": "API key not valid. Please pass a valid API key.", "status": "INVALID_ARGUMENT"}}, ErrorCategory.CREDENTIAL_INVALID),
		(403, {"error": {"status": "PERMISSION_DENIED"}}, ErrorCategory.PERMISSION_DENIED),
		(429, {"error": {"status": "RESOURCE_EXHAUSTED", "message": "Resource has been exhausted (e.g. check quota)."}}, ErrorCategory.RATE_LIMITED),
		(500, {"error": {"status": "INTERNAL"}}, ErrorCategory.INTERNAL_BACKEND_ERROR),
	],
)
async def test_http_errors_become_generation_errors(status, body, category):
	client = make_client(lambda request: httpx.Response(status, json=body))
	try:
		with pytest.raises(GenerationError) as excinfo:
			await client.generate(InstructionPair(system="s", user="u"))
	finally:
		await client.aclose()
	assert excinfo.value.status_code == status
	assert "test-key" not in str(excinfo.value)
	assert detect_category(str(excinfo.value)) == category


async def test_transport_errors_become_generation_errors():
	def handler(request):
		raise httpx.ConnectError("connection refused", request=request)

	client = make_client(handler)
	try:
		with pytest.raises(GenerationError) as excinfo:
			await client.generate(InstructionPair(system="s", user="u"))
	finally:
		await client.aclose()
	assert excinfo.value.status_code is None
	assert detect_category(str(excinfo.value)) == ErrorCategory.NETWORK_FAILURE


async def test_timeout_is_reported_as_timeout():
	def handler(request):
		raise httpx.ReadTimeout("", request=request)

	client = make_client(handler)
	try:
		with pytest.raises(GenerationError) as excinfo:
			await client.generate(InstructionPair(system="s", user="u"))
	finally:
		await client.aclose()
	assert detect_category(str(excinfo.value)) == ErrorCategory.TIMEOUT


@pytest.mark.parametrize(
	"payload,category",
	[
		({"promptFeedback": {"blockReason": "SAFETY"}}, ErrorCategory.CONTENT_FILTERED),
		({"candidates": [{"finishReason": "SAFETY"}]}, ErrorCategory.CONTENT_FILTERED),
		({"candidates": [{"content": {"parts": [{"text": "  "}]}}]}, ErrorCategory.UNKNOWN),
		({"unexpected": True}, ErrorCategory.UNKNOWN),
		([], ErrorCategory.UNKNOWN),
	],
)
async def test_unusable_responses_raise(payload, category):
	client = make_client(lambda request: httpx.Response(200, json=payload))
	try:
		with pytest.raises(GenerationError) as excinfo:
			await client.generate(InstructionPair(system="s", user="u"))
	finally:
		await client.aclose()
	assert detect_category(str(excinfo.value)) == category
