from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..errors import HistoryEntryNotFound
from ..state import get_workspace
from ..storage import HistoryEntry
from ..workspace import Workspace
from .documents import DocumentResponse, _respond, render_options

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=List[HistoryEntry])
async def list_history(workspace: Workspace = Depends(get_workspace)):
	return workspace.history()


@router.post("/{entry_id}/select", response_model=DocumentResponse)
async def select_entry(entry_id: str, requested: dict = Depends(render_options), workspace: Workspace = Depends(get_workspace)):
	try:
		document = workspace.select(entry_id)
	except HistoryEntryNotFound:
		raise HTTPException(status_code=404, detail="history entry not found")
	return _respond(document, requested)


@router.delete("/{entry_id}")
async def delete_entry(entry_id: str, workspace: Workspace = Depends(get_workspace)):
	try:
		remaining = workspace.delete(entry_id)
	except HistoryEntryNotFound:
		raise HTTPException(status_code=404, detail="history entry not found")
	return {"ok": True, "remaining": len(remaining)}
