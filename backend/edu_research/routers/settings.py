from __future__ import annotations
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..settings import settings
from ..state import get_credentials, get_theme_store
from ..storage import CredentialStore, ThemeStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class ApiKeyRequest(BaseModel):
	api_key: str = Field(min_length=1, max_length=256)


class ThemeRequest(BaseModel):
	theme: Literal["light", "dark", "system"]


class SettingsResponse(BaseModel):
	api_key_configured: bool
	api_key_masked: Optional[str] = None
	using_environment_key: bool = False
	theme: str


def _settings_response(credentials: CredentialStore, themes: ThemeStore) -> SettingsResponse:
	stored = credentials.masked()
	return SettingsResponse(
		api_key_configured=stored is not None or bool(settings.gemini_api_key),
		api_key_masked=stored,
		using_environment_key=stored is None and bool(settings.gemini_api_key),
		theme=themes.get(),
	)


@router.get("", response_model=SettingsResponse)
async def read_settings(credentials: CredentialStore = Depends(get_credentials), themes: ThemeStore = Depends(get_theme_store)):
	return _settings_response(credentials, themes)


@router.put("/api-key", response_model=SettingsResponse)
async def save_api_key(
	req: ApiKeyRequest,
	credentials: CredentialStore = Depends(get_credentials),
	themes: ThemeStore = Depends(get_theme_store),
):
	credentials.set(req.api_key)
	logger.info("API key updated")
	return _settings_response(credentials, themes)


@router.delete("/api-key", response_model=SettingsResponse)
async def clear_api_key(credentials: CredentialStore = Depends(get_credentials), themes: ThemeStore = Depends(get_theme_store)):
	credentials.clear()
	logger.info("API key removed")
	return _settings_response(credentials, themes)


@router.put("/theme", response_model=SettingsResponse)
async def save_theme(
	req: ThemeRequest,
	credentials: CredentialStore = Depends(get_credentials),
	themes: ThemeStore = Depends(get_theme_store),
):
	themes.set(req.theme)
	return _settings_response(credentials, themes)


@router.post("/theme/toggle", response_model=SettingsResponse)
async def toggle_theme(credentials: CredentialStore = Depends(get_credentials), themes: ThemeStore = Depends(get_theme_store)):
	themes.toggle()
	return _settings_response(credentials, themes)
