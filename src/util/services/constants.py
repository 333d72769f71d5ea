from __future__ import annotations

# Health check intervals (minutes)
HEALTH_CHECK_INTERVALS = {
	"MIN": 1,
	"MAX": 1440,
	"DEFAULT": 30,
}

# Connection test timeout (milliseconds)
CONNECTION_TEST_TIMEOUT = {
	"MIN": 1000,
	"MAX": 30000,
	"DEFAULT": 5000,
}

API_KEY_DISPLAY_MASK = "••••••••••••••••"

SERVICE_VALIDATION = {
	"ID_MIN_LENGTH": 1,
	"ID_MAX_LENGTH": 50,
	"NAME_MIN_LENGTH": 1,
	"NAME_MAX_LENGTH": 100,
	"DESCRIPTION_MAX_LENGTH": 500,
	"USER_ROLE_MAX_LENGTH": 100,
	"VERSION_MAX_LENGTH": 50,
}

SERVICE_STATUSES = ("online", "offline", "error", "unknown")

SERVICE_CATEGORY_NAMES = (
	"media",
	"storage",
	"management",
	"productivity",
	"security",
	"monitoring",
	"development",
	"communication",
)

SERVICE_TYPES = (
	"jellyfin",
	"nextcloud",
	"radarr",
	"sonarr",
	"plex",
	"overseerr",
	"tautulli",
	"portainer",
	"homeassistant",
	"grafana",
	"prometheus",
	"custom",
)

AUTH_TYPES = ("api_key", "basic_auth", "oauth", "none")

DEFAULT_SERVICE_PORTS: dict[str, int] = {
	"jellyfin": 8096,
	"nextcloud": 8080,
	"radarr": 7878,
	"sonarr": 8989,
	"plex": 32400,
	"overseerr": 5055,
	"tautulli": 8181,
	"portainer": 9000,
	"homeassistant": 8123,
	"grafana": 3000,
	"prometheus": 9090,
}

HEALTH_CHECK_ENDPOINTS: dict[str, str] = {
	"jellyfin": "/health",
	"nextcloud": "/status.php",
	"radarr": "/api/v3/system/status",
	"sonarr": "/api/v3/system/status",
	"plex": "/identity",
	"overseerr": "/api/v1/status",
	"tautulli": "/api/v2?cmd=arnold",
	"portainer": "/api/status",
	"homeassistant": "/api/",
	"grafana": "/api/health",
	"prometheus": "/-/healthy",
}

SERVICE_DOCUMENTATION: dict[str, str] = {
	"jellyfin": "https://jellyfin.org/docs/",
	"nextcloud": "https://docs.nextcloud.com/",
	"radarr": "https://wiki.servarr.com/radarr",
	"sonarr": "https://wiki.servarr.com/sonarr",
	"plex": "https://support.plex.tv/",
	"overseerr": "https://docs.overseerr.dev/",
	"tautulli": "https://github.com/Tautulli/Tautulli-Wiki",
	"portainer": "https://docs.portainer.io/",
	"homeassistant": "https://www.home-assistant.io/docs/",
	"grafana": "https://grafana.com/docs/",
	"prometheus": "https://prometheus.io/docs/",
}
