from __future__ import annotations

import copy
import re
from urllib.parse import urlparse

from util.services.constants import DEFAULT_SERVICE_PORTS, SERVICE_DOCUMENTATION

DEFAULT_SERVICE_CONFIGS: dict[str, dict] = {
	"jellyfin": {
		"category": "media",
		"service_type": "jellyfin",
		"auth_type": "api_key",
		"requires_auth": True,
		"supports_user_provisioning": True,
		"default_user_role": "User",
		"health_check_interval": 30,
		"icon": "jellyfin",
		"description": "Media server for streaming movies, TV shows, and music",
	},
	"nextcloud": {
		"category": "storage",
		"service_type": "nextcloud",
		"auth_type": "basic_auth",
		"requires_auth": True,
		"supports_user_provisioning": True,
		"default_user_role": "users",
		"health_check_interval": 30,
		"icon": "nextcloud",
		"description": "Personal cloud storage and collaboration platform",
	},
	"radarr": {
		"category": "management",
		"service_type": "radarr",
		"auth_type": "api_key",
		"requires_auth": True,
		"supports_user_provisioning": False,
		"health_check_interval": 60,
		"icon": "radarr",
		"description": "Movie collection manager",
	},
	"sonarr": {
		"category": "management",
		"service_type": "sonarr",
		"auth_type": "api_key",
		"requires_auth": True,
		"supports_user_provisioning": False,
		"health_check_interval": 60,
		"icon": "sonarr",
		"description": "TV series collection manager",
	},
	"plex": {
		"category": "media",
		"service_type": "plex",
		"auth_type": "oauth",
		"requires_auth": True,
		"supports_user_provisioning": True,
		"default_user_role": "User",
		"health_check_interval": 30,
		"icon": "plex",
		"description": "Media server and streaming platform",
	},
	"overseerr": {
		"category": "management",
		"service_type": "overseerr",
		"auth_type": "api_key",
		"requires_auth": True,
		"supports_user_provisioning": True,
		"default_user_role": "user",
		"health_check_interval": 60,
		"icon": "overseerr",
		"description": "Request management for media servers",
	},
	"tautulli": {
		"category": "monitoring",
		"service_type": "tautulli",
		"auth_type": "api_key",
		"requires_auth": True,
		"supports_user_provisioning": False,
		"health_check_interval": 60,
		"icon": "tautulli",
		"description": "Monitoring and analytics for Plex",
	},
	"portainer": {
		"category": "management",
		"service_type": "portainer",
		"auth_type": "basic_auth",
		"requires_auth": True,
		"supports_user_provisioning": True,
		"default_user_role": "standard",
		"health_check_interval": 30,
		"icon": "portainer",
		"description": "Container management interface",
	},
	"homeassistant": {
		"category": "management",
		"service_type": "homeassistant",
		"auth_type": "api_key",
		"requires_auth": True,
		"supports_user_provisioning": True,
		"default_user_role": "user",
		"health_check_interval": 30,
		"icon": "homeassistant",
		"description": "Home automation platform",
	},
	"grafana": {
		"category": "monitoring",
		"service_type": "grafana",
		"auth_type": "basic_auth",
		"requires_auth": True,
		"supports_user_provisioning": True,
		"default_user_role": "Viewer",
		"health_check_interval": 60,
		"icon": "grafana",
		"description": "Monitoring and observability platform",
	},
	"prometheus": {
		"category": "monitoring",
		"service_type": "prometheus",
		"auth_type": "basic_auth",
		"requires_auth": False,
		"supports_user_provisioning": False,
		"health_check_interval": 60,
		"icon": "prometheus",
		"description": "Monitoring and alerting toolkit",
	},
	"custom": {
		"category": "productivity",
		"service_type": "custom",
		"auth_type": "none",
		"requires_auth": False,
		"supports_user_provisioning": False,
		"health_check_interval": 60,
		"icon": "gear",
		"description": "Custom service configuration",
	},
}

SERVICE_CATEGORIES: dict[str, dict[str, str]] = {
	"media": {"label": "Media", "description": "Video, audio, and media streaming services"},
	"storage": {"label": "Storage", "description": "File storage and synchronization services"},
	"management": {"label": "Management", "description": "Service and infrastructure management tools"},
	"productivity": {"label": "Productivity", "description": "Productivity and collaboration tools"},
	"security": {"label": "Security", "description": "Security and authentication services"},
	"monitoring": {"label": "Monitoring", "description": "System monitoring and analytics tools"},
	"development": {"label": "Development", "description": "Development and CI/CD tools"},
	"communication": {"label": "Communication", "description": "Communication and messaging platforms"},
}


def get_default_service_config(service_type: str) -> dict:
	if service_type not in DEFAULT_SERVICE_CONFIGS:
		raise KeyError(f"Unknown service type: {service_type}")
	return copy.deepcopy(DEFAULT_SERVICE_CONFIGS[service_type])


def generate_service_key(service_type: str, name: str) -> str:
	if service_type == "custom":
		return re.sub(r"-+", "-", re.sub(r"[^a-z0-9]", "-", (name or "").lower()))
	return service_type


def is_valid_service_url(url: str) -> bool:
	try:
		parsed = urlparse(url or "")
	except ValueError:
		return False
	return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def get_service_icon(service_type: str) -> str:
	config = DEFAULT_SERVICE_CONFIGS.get(service_type) or {}
	return config.get("icon") or "gear"


def describe_service_type(service_type: str) -> dict:
	"""Category label, icon, local port and docs link for a known service type."""
	config = DEFAULT_SERVICE_CONFIGS.get(service_type) or DEFAULT_SERVICE_CONFIGS["custom"]
	category = SERVICE_CATEGORIES.get(config["category"]) or {}
	port = DEFAULT_SERVICE_PORTS.get(service_type)
	return {
		"service_type": service_type,
		"category": config["category"],
		"category_label": category.get("label", ""),
		"icon": get_service_icon(service_type),
		"default_port": port,
		"local_url": f"http://localhost:{port}" if port else None,
		"documentation_url": SERVICE_DOCUMENTATION.get(service_type),
	}
