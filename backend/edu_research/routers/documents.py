from __future__ import annotations
import logging
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, field_validator

from ..errors import (
	CredentialMissingError,
	ErrorCategory,
	GenerationError,
	NoActiveDocumentError,
	SupersededError,
	classify,
	describe,
)
from ..prompts import GeneratedDocument, GenerationRequest, default_direction
from ..render import Direction, RenderedDocument, RenderOptions, render_document, render_printable
from ..state import get_workspace
from ..workspace import Workspace, WorkspaceState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


class DocumentResponse(BaseModel):
	document: GeneratedDocument
	rendered: RenderedDocument


class CurrentDocumentResponse(WorkspaceState):
	rendered: Optional[RenderedDocument] = None


class BoundedRenderOptions(RenderOptions):
	font_size: float = Field(default=18, ge=12, le=32)
	line_height: float = Field(default=1.6, ge=1.0, le=2.5)


class RenderRequest(BaseModel):
	content: str
	options: BoundedRenderOptions = Field(default_factory=BoundedRenderOptions)

	@field_validator("content")
	@classmethod
	def _replace_lone_surrogates(cls, value: str) -> str:
		# Lone surrogates from JSON escapes cannot be encoded into the response
		return value.encode("utf-8", "replace").decode("utf-8")


def render_options(
	direction: Optional[Direction] = Query(default=None),
	font_size: float = Query(default=18, ge=12, le=32),
	line_height: float = Query(default=1.6, ge=1.0, le=2.5),
) -> dict:
	return {"direction": direction, "font_size": font_size, "line_height": line_height}


def _options_for(document: GeneratedDocument, requested: dict) -> RenderOptions:
	direction = requested.get("direction") or default_direction(document.source_request.language)
	return RenderOptions(direction=direction, font_size=requested["font_size"], line_height=requested["line_height"])


def _respond(document: GeneratedDocument, requested: dict) -> DocumentResponse:
	return DocumentResponse(document=document, rendered=render_document(document.content, _options_for(document, requested)))


async def _run_generation(workspace: Workspace, call: Callable[[], Awaitable[GeneratedDocument]]) -> GeneratedDocument:
	try:
		return await call()
	except CredentialMissingError:
		detail = describe(ErrorCategory.CREDENTIAL_MISSING, workspace.locale).model_dump(mode="json")
		raise HTTPException(status_code=401, detail={**detail, "settings_required": True})
	except GenerationError as err:
		classified = err.classified or classify(str(err), workspace.locale)
		raise HTTPException(status_code=502, detail=classified.model_dump(mode="json"))
	except SupersededError as err:
		raise HTTPException(status_code=409, detail=str(err))
	except NoActiveDocumentError as err:
		raise HTTPException(status_code=400, detail=str(err))


@router.get("/current", response_model=CurrentDocumentResponse)
async def current_document(requested: dict = Depends(render_options), workspace: Workspace = Depends(get_workspace)):
	state = workspace.snapshot()
	rendered = None
	if state.current_document is not None:
		rendered = render_document(state.current_document.content, _options_for(state.current_document, requested))
	return CurrentDocumentResponse(**state.model_dump(), rendered=rendered)


@router.post("", response_model=DocumentResponse)
async def generate(req: GenerationRequest, requested: dict = Depends(render_options), workspace: Workspace = Depends(get_workspace)):
	document = await _run_generation(workspace, lambda: workspace.submit(req))
	return _respond(document, requested)


@router.post("/regenerate", response_model=DocumentResponse)
async def regenerate(requested: dict = Depends(render_options), workspace: Workspace = Depends(get_workspace)):
	document = await _run_generation(workspace, workspace.regenerate)
	return _respond(document, requested)


@router.post("/extend", response_model=DocumentResponse)
async def extend(requested: dict = Depends(render_options), workspace: Workspace = Depends(get_workspace)):
	document = await _run_generation(workspace, workspace.extend)
	return _respond(document, requested)


@router.delete("/current")
async def clear(workspace: Workspace = Depends(get_workspace)):
	workspace.clear()
	return {"ok": True}


@router.get("/current/print", response_class=HTMLResponse)
async def print_view(
	auto_print: bool = Query(default=True),
	requested: dict = Depends(render_options),
	workspace: Workspace = Depends(get_workspace),
):
	document = workspace.current_document
	if document is None:
		raise HTTPException(status_code=404, detail="no document to print")
	options = _options_for(document, requested)
	return HTMLResponse(render_printable(document.content, document.source_request.topic, options, auto_print=auto_print))


@router.post("/render", response_model=RenderedDocument)
async def render(req: RenderRequest):
	return render_document(req.content, req.options)
