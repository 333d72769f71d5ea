from __future__ import annotations

from types import SimpleNamespace

from app.api_handlers import services
from sql.supabase_client import SupabaseError
from util.services.constants import API_KEY_DISPLAY_MASK
from util.services.schema import ServiceHealthCheck

ADMIN_ID = "11111111-1111-4111-8111-111111111111"


def _row(**overrides):
	row = {
		"service_key": "jellyfin",
		"name": "Jellyfin",
		"description": "Media server",
		"url": "http://media.lan:8096",
		"api_key": "secret",
		"enabled": True,
		"auto_provision": False,
		"status": "online",
		"health_check_interval": 30,
		"category": "media",
		"service_type": "jellyfin",
		"auth_type": "api_key",
		"tags": [],
		"account_id": ADMIN_ID,
		"created_by": ADMIN_ID,
		"updated_by": ADMIN_ID,
		"created_at": "2024-05-01T10:00:00+00:00",
		"updated_at": "2024-05-01T10:00:00+00:00",
	}
	row.update(overrides)
	return row


class _Interface:
	def __init__(self, rows=None, list_error=None):
		self.rows = {r["service_key"]: r for r in (rows or [])}
		self.list_error = list_error
		self.updates = []
		self.inserted = []

	def list_services(self):
		if self.list_error:
			raise self.list_error
		return list(self.rows.values())

	def get_service(self, key):
		return self.rows.get(key)

	def update_service(self, key, updates):
		self.updates.append((key, updates))
		row = dict(self.rows[key])
		row.update(updates)
		self.rows[key] = row
		return row

	def insert_service(self, row):
		self.inserted.append(row)
		self.rows[row["service_key"]] = row
		return dict(row, created_at="2024-05-01T10:00:00+00:00", updated_at="2024-05-01T10:00:00+00:00")


def _ctx(interface, env=None):
	return SimpleNamespace(
		auth_token_name="sb-access-token",
		interface=interface,
		fcr=SimpleNamespace(find=lambda _: None),
		env=env or {},
	)


def test_portal_services_require_session(app_factory):
	app = app_factory(services.register, _ctx(_Interface()))
	assert app.test_client().get("/api/services").status_code == 401


def test_portal_services_listing(monkeypatch, app_factory):
	monkeypatch.setattr(services, "require_user", lambda ctx: ({"id": "u1"}, None))
	env = {"NEXT_PUBLIC_JELLYFIN_URL": "https://jellyfin.example.com"}
	app = app_factory(services.register, _ctx(_Interface(), env))

	data = app.test_client().get("/api/services").get_json()["data"]
	by_key = {s["key"]: s for s in data}
	assert [s["key"] for s in data] == ["jellyfin", "manga-reader", "radarr", "sonarr", "nextcloud"]
	assert by_key["jellyfin"]["url"] == "https://jellyfin.example.com"
	assert by_key["jellyfin"]["configured"] is True
	assert by_key["radarr"]["url"] == "#"
	assert by_key["radarr"]["configured"] is False


def test_admin_settings_defaults_when_table_empty(app_factory, as_admin):
	as_admin(services)
	app = app_factory(services.register, _ctx(_Interface()))

	body = app.test_client().get("/api/admin/services").get_json()
	assert body["total"] == 5
	assert body["online"] == 0
	jellyfin = body["data"][0]
	assert jellyfin["url"] == "http://localhost:8096"
	assert jellyfin["api_key"] == API_KEY_DISPLAY_MASK


def test_admin_settings_fall_back_on_backend_error(app_factory, as_admin):
	as_admin(services)
	app = app_factory(services.register, _ctx(_Interface(list_error=SupabaseError("down"))))

	body = app.test_client().get("/api/admin/services").get_json()
	assert body["ok"] is True
	assert body["total"] == 5


def test_admin_settings_from_stored_rows(app_factory, as_admin):
	as_admin(services)
	app = app_factory(services.register, _ctx(_Interface([_row()])))

	body = app.test_client().get("/api/admin/services").get_json()
	assert body["total"] == 1
	assert body["online"] == 1
	assert body["data"][0]["api_key"] == API_KEY_DISPLAY_MASK
	assert body["data"][0]["category"] == "media"
	assert body["data"][0]["documentation_url"] == "https://jellyfin.org/docs/"


def test_toggle_flips_enabled(app_factory, as_admin):
	as_admin(services)
	interface = _Interface([_row(enabled=True)])
	app = app_factory(services.register, _ctx(interface))

	resp = app.test_client().post("/api/admin/services/jellyfin/toggle")
	assert resp.status_code == 200
	key, updates = interface.updates[0]
	assert key == "jellyfin"
	assert updates["enabled"] is False
	assert updates["updated_by"] == ADMIN_ID
	assert "updated_at" in updates


def test_auto_provision_unknown_service(app_factory, as_admin):
	as_admin(services)
	app = app_factory(services.register, _ctx(_Interface()))

	resp = app.test_client().post("/api/admin/services/nope/auto-provision")
	assert resp.status_code == 404


def test_connection_test_stores_status(monkeypatch, app_factory, as_admin):
	as_admin(services)
	seen = {}

	def _fake_check(service_id, url, **kwargs):
		seen.update(url=url, **kwargs)
		return ServiceHealthCheck(id=service_id, status="offline", error_message="Connection timed out.")

	monkeypatch.setattr(services, "check_service_connection", _fake_check)
	interface = _Interface([_row()])
	app = app_factory(services.register, _ctx(interface))

	resp = app.test_client().post("/api/admin/services/jellyfin/test")
	assert resp.status_code == 200
	assert resp.get_json()["data"]["status"] == "offline"
	assert seen["url"] == "http://media.lan:8096"
	assert seen["auth_type"] == "api_key"
	assert seen["api_key"] == "secret"
	assert interface.updates[0][1]["status"] == "offline"


def test_connection_test_for_unstored_default(monkeypatch, app_factory, as_admin):
	as_admin(services)
	seen = {}

	def _fake_check(service_id, url, **kwargs):
		seen["url"] = url
		return ServiceHealthCheck(id=service_id, status="online", response_time_ms=12.0)

	monkeypatch.setattr(services, "check_service_connection", _fake_check)
	interface = _Interface()
	app = app_factory(services.register, _ctx(interface))

	resp = app.test_client().post("/api/admin/services/sonarr/test")
	assert resp.status_code == 200
	assert seen["url"] == "http://localhost:8989"
	assert interface.updates == []


def test_connection_test_rejects_bad_url(app_factory, as_admin):
	as_admin(services)
	app = app_factory(services.register, _ctx(_Interface()))

	resp = app.test_client().post("/api/admin/services/sonarr/test", json={"url": "ftp://x"})
	assert resp.status_code == 400
	assert "url" in resp.get_json()["errors"]


def test_create_service_from_type_defaults(app_factory, as_admin):
	as_admin(services)
	interface = _Interface()
	app = app_factory(services.register, _ctx(interface))

	resp = app.test_client().post("/api/admin/services", json={
		"service_type": "custom",
		"name": "My Wiki",
		"url": "https://wiki.example.com",
		"category": "productivity",
	})
	assert resp.status_code == 201
	row = interface.inserted[0]
	assert row["service_key"] == "my-wiki"
	assert row["created_by"] == ADMIN_ID
	assert resp.get_json()["data"]["id"] == "my-wiki"


def test_create_service_unknown_type(app_factory, as_admin):
	as_admin(services)
	app = app_factory(services.register, _ctx(_Interface()))

	resp = app.test_client().post("/api/admin/services", json={"service_type": "toaster"})
	assert resp.status_code == 400


def test_create_service_validation_errors(app_factory, as_admin):
	as_admin(services)
	app = app_factory(services.register, _ctx(_Interface()))

	resp = app.test_client().post("/api/admin/services", json={
		"service_type": "radarr",
		"name": "Radarr",
		"url": "not a url",
	})
	assert resp.status_code == 400
	assert "url" in resp.get_json()["errors"]


def test_toggle_default_service_stores_defaults_first(app_factory, as_admin):
	as_admin(services)
	interface = _Interface()
	app = app_factory(services.register, _ctx(interface))
	client = app.test_client()

	listed = [s["id"] for s in client.get("/api/admin/services").get_json()["data"]]
	assert listed == ["jellyfin", "nextcloud", "radarr", "sonarr", "manga-reader"]

	resp = client.post("/api/admin/services/jellyfin/toggle")
	assert resp.status_code == 200
	assert resp.get_json()["data"]["enabled"] is False
	assert sorted(r["service_key"] for r in interface.inserted) == sorted(listed)
	assert interface.rows["manga-reader"]["service_type"] == "custom"
	assert interface.rows["jellyfin"]["created_by"] == ADMIN_ID

	after = {s["id"]: s for s in client.get("/api/admin/services").get_json()["data"]}
	assert set(after) == set(listed)
	assert after["jellyfin"]["enabled"] is False


def test_toggle_unknown_service_is_not_found(app_factory, as_admin):
	as_admin(services)
	interface = _Interface()
	app = app_factory(services.register, _ctx(interface))

	resp = app.test_client().post("/api/admin/services/plex/toggle")
	assert resp.status_code == 404
	assert interface.inserted == []


def test_create_service_ignores_non_object_body(app_factory, as_admin):
	as_admin(services)
	app = app_factory(services.register, _ctx(_Interface()))

	resp = app.test_client().post("/api/admin/services", json=["service_type", "radarr"])
	assert resp.status_code == 400
	assert resp.get_json()["message"] == "Unknown service type."

	resp = app.test_client().post("/api/admin/services", json={"service_type": 7})
	assert resp.status_code == 400
