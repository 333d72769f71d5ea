from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from util.services.constants import API_KEY_DISPLAY_MASK

UNCONFIGURED_URL = "#"


@dataclass(frozen=True)
class PortalService:
	key: str
	name: str
	description: str
	env_var: str
	category: str
	service_type: str
	local_url: str
	featured: bool = False
	auto_provision: bool = False
	has_api_key: bool = True
	settings_description: str | None = None


# Display order of the dashboard.
PORTAL_SERVICES: tuple[PortalService, ...] = (
	PortalService(
		key="jellyfin",
		name="Jellyfin",
		description="Stream your personal media library",
		settings_description="Media server for streaming movies, TV shows, and music",
		env_var="NEXT_PUBLIC_JELLYFIN_URL",
		category="media",
		service_type="jellyfin",
		local_url="http://localhost:8096",
		featured=True,
		auto_provision=True,
	),
	PortalService(
		key="manga-reader",
		name="Manga Reader",
		description="Read your manga collection",
		settings_description="Manga reading application",
		env_var="NEXT_PUBLIC_MANGA_READER_URL",
		category="media",
		service_type="custom",
		local_url="http://localhost:9000",
		has_api_key=False,
	),
	PortalService(
		key="radarr",
		name="Radarr",
		description="Movie collection manager",
		env_var="NEXT_PUBLIC_RADARR_URL",
		category="management",
		service_type="radarr",
		local_url="http://localhost:7878",
	),
	PortalService(
		key="sonarr",
		name="Sonarr",
		description="TV series collection manager",
		env_var="NEXT_PUBLIC_SONARR_URL",
		category="management",
		service_type="sonarr",
		local_url="http://localhost:8989",
	),
	PortalService(
		key="nextcloud",
		name="Nextcloud",
		description="Your personal cloud storage",
		settings_description="Personal cloud storage and collaboration platform",
		env_var="NEXT_PUBLIC_NEXTCLOUD_URL",
		category="productivity",
		service_type="nextcloud",
		local_url="http://localhost:8080",
		featured=True,
		auto_provision=True,
	),
)

# Admin settings list order.
SETTINGS_ORDER = ("jellyfin", "nextcloud", "radarr", "sonarr", "manga-reader")


def get_portal_service(key: str) -> PortalService | None:
	return next((s for s in PORTAL_SERVICES if s.key == key), None)


def resolve_service_url(service: PortalService, env: Mapping[str, str] | None = None, *, fallback: str = UNCONFIGURED_URL) -> str:
	env_vars = env if env is not None else os.environ
	url = (env_vars.get(service.env_var) or "").strip()
	return url or fallback


def get_portal_services(env: Mapping[str, str] | None = None) -> list[dict]:
	out = []
	for service in PORTAL_SERVICES:
		url = resolve_service_url(service, env)
		out.append({
			"key": service.key,
			"name": service.name,
			"description": service.description,
			"url": url,
			"category": service.category,
			"featured": service.featured,
			"configured": url != UNCONFIGURED_URL,
		})
	return out


def get_featured_services(env: Mapping[str, str] | None = None) -> list[dict]:
	return [s for s in get_portal_services(env) if s["featured"]]


def get_default_service_settings(env: Mapping[str, str] | None = None) -> list[dict]:
	"""Settings shown before any service has been stored in the services table."""
	out = []
	for key in SETTINGS_ORDER:
		service = get_portal_service(key)
		out.append({
			"id": service.key,
			"name": service.name,
			"url": resolve_service_url(service, env, fallback=service.local_url),
			"api_key": API_KEY_DISPLAY_MASK if service.has_api_key else None,
			"enabled": True,
			"status": "unknown",
			"description": service.settings_description or service.description,
			"auto_provision": service.auto_provision,
			"service_type": service.service_type,
		})
	return out


def summarize_status(settings: list[dict]) -> dict[str, int]:
	online = sum(1 for s in settings if s.get("status") == "online")
	return {"online": online, "total": len(settings)}
