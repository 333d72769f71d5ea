from __future__ import annotations

import logging
from datetime import datetime, timezone

import flask

from app.api_context import ApiContext
from app.api_common import json_error, request_data, require_admin, require_user, text_field
from sql.supabase_client import SupabaseError
from util.services.catalog import (
	SETTINGS_ORDER,
	PortalService,
	get_default_service_settings,
	get_portal_service,
	get_portal_services,
	resolve_service_url,
	summarize_status,
)
from util.services.constants import API_KEY_DISPLAY_MASK
from util.services.health import check_service_connection
from util.services.mappers import (
	map_create_service_to_insert,
	map_service_row_to_service,
	map_update_service_to_update,
)
from util.services.schema import (
	Service,
	ServiceValidationError,
	build_service,
	validate_connection_test,
)
from util.services.service_config import describe_service_type, generate_service_key, get_default_service_config

logger = logging.getLogger(__name__)

# Fields an admin may set when registering a service.
_CREATE_FIELDS = (
	"name", "description", "url", "api_key", "enabled", "auto_provision",
	"health_check_interval", "category", "auth_type", "requires_auth",
	"ssl_enabled", "default_user_role", "version", "icon", "documentation", "tags",
	"user_provisioning_config",
)


def _settings_entry(service: Service) -> dict:
	return {
		"id": service.id,
		"name": service.name,
		"url": service.url,
		"api_key": API_KEY_DISPLAY_MASK if service.api_key else None,
		"enabled": service.enabled,
		"status": service.status,
		"description": service.description,
		"auto_provision": service.auto_provision,
		"service_type": service.service_type,
		"last_health_check": service.last_health_check.isoformat() if service.last_health_check else None,
		"category": service.category,
		"documentation_url": service.documentation or describe_service_type(service.service_type)["documentation_url"],
	}


def load_service_settings(ctx: ApiContext) -> list[dict]:
	try:
		rows = ctx.interface.list_services()
	except SupabaseError as e:
		logger.warning("Could not load stored services, using defaults: %s", e)
		rows = []
	if not rows:
		return get_default_service_settings(ctx.env)
	return [_settings_entry(map_service_row_to_service(row)) for row in rows]


def _default_service_row(portal: PortalService, env, admin_id: str) -> dict:
	payload = dict(get_default_service_config(portal.service_type))
	payload.update({
		"id": portal.key,
		"name": portal.name,
		"description": portal.settings_description or portal.description,
		"url": resolve_service_url(portal, env, fallback=portal.local_url),
		"category": portal.category,
		"enabled": True,
		"auto_provision": portal.auto_provision,
		"account_id": admin_id,
		"created_by": admin_id,
		"updated_by": admin_id,
	})
	return map_create_service_to_insert(build_service(payload))


def _seed_default_services(ctx: ApiContext, admin_id: str) -> None:
	"""Store the built-in defaults so they can be edited like any stored row."""
	stored = {row.get("service_key") for row in ctx.interface.list_services()}
	for key in SETTINGS_ORDER:
		if key not in stored:
			ctx.interface.insert_service(_default_service_row(get_portal_service(key), ctx.env, admin_id))
	logger.info("Stored default services for editing (admin %s)", admin_id)


def _flip(ctx: ApiContext, service_key: str, field: str):
	admin, err = require_admin(ctx)
	if err:
		return err
	try:
		row = ctx.interface.get_service(service_key)
		if not row and service_key in SETTINGS_ORDER:
			_seed_default_services(ctx, admin["id"])
			row = ctx.interface.get_service(service_key)
	except ServiceValidationError as e:
		return flask.jsonify({"ok": False, "message": "Invalid service.", "errors": e.errors}), 400
	except SupabaseError as e:
		logger.error("Failed to load service %s: %s", service_key, e)
		return json_error("Failed to load service.", 500)
	if not row:
		return json_error("Service not found.", 404)

	value = not bool(row.get(field))
	try:
		updated = ctx.interface.update_service(
			service_key,
			map_update_service_to_update({field: value}, admin["id"]),
		)
	except SupabaseError as e:
		logger.error("Failed to update %s on %s: %s", field, service_key, e)
		return json_error(str(e), 400)
	logger.info("Service %s: %s set to %s by %s", service_key, field, value, admin["id"])
	return flask.jsonify({"ok": True, "data": updated or {field: value}})


def register(api: flask.Blueprint, ctx: ApiContext) -> None:
	@api.route("/api/services")
	def api_services():
		_user, err = require_user(ctx)
		if err:
			return err
		return flask.jsonify({"ok": True, "data": get_portal_services(ctx.env)})

	@api.route("/api/admin/services")
	def api_admin_services():
		_user, err = require_admin(ctx)
		if err:
			return err
		settings = load_service_settings(ctx)
		return flask.jsonify({"ok": True, "data": settings, **summarize_status(settings)})

	@api.route("/api/admin/services", methods=["POST"])
	def api_admin_services_create():
		admin, err = require_admin(ctx)
		if err:
			return err
		data = request_data()
		service_type = text_field(data, "service_type")
		try:
			defaults = get_default_service_config(service_type)
		except KeyError:
			return json_error("Unknown service type.", 400)

		payload = dict(defaults)
		payload.update({k: data[k] for k in _CREATE_FIELDS if k in data})
		payload["service_type"] = service_type
		payload["id"] = text_field(data, "id") or generate_service_key(service_type, text_field(payload, "name"))
		payload["account_id"] = admin["id"]
		payload["created_by"] = admin["id"]
		payload["updated_by"] = admin["id"]
		try:
			service = build_service(payload)
		except ServiceValidationError as e:
			return flask.jsonify({"ok": False, "message": "Invalid service.", "errors": e.errors}), 400

		try:
			row = ctx.interface.insert_service(map_create_service_to_insert(service))
		except SupabaseError as e:
			logger.error("Failed to create service %s: %s", service.id, e)
			return json_error(str(e), 400)
		logger.info("Service %s created by %s", service.id, admin["id"])
		created = map_service_row_to_service(row) if row else service
		return flask.jsonify({"ok": True, "data": created.to_dict(mask_api_key=API_KEY_DISPLAY_MASK)}), 201

	@api.route("/api/admin/services/<service_key>/toggle", methods=["POST"])
	def api_admin_services_toggle(service_key: str):
		return _flip(ctx, service_key, "enabled")

	@api.route("/api/admin/services/<service_key>/auto-provision", methods=["POST"])
	def api_admin_services_auto_provision(service_key: str):
		return _flip(ctx, service_key, "auto_provision")

	@api.route("/api/admin/services/<service_key>/test", methods=["POST"])
	def api_admin_services_test(service_key: str):
		admin, err = require_admin(ctx)
		if err:
			return err
		data = request_data()
		try:
			row = ctx.interface.get_service(service_key)
		except SupabaseError as e:
			logger.warning("Could not load service %s: %s", service_key, e)
			row = None

		if data.get("url"):
			try:
				target = validate_connection_test(data)
			except ServiceValidationError as e:
				return flask.jsonify({"ok": False, "message": "Invalid connection test.", "errors": e.errors}), 400
			service_type = (row or {}).get("service_type")
		elif row:
			target = {
				"url": row["url"],
				"auth_type": row.get("auth_type") or "none",
				"api_key": row.get("api_key"),
				"timeout": None,
			}
			service_type = row.get("service_type")
		else:
			portal = get_portal_service(service_key)
			if portal is None:
				return json_error("Service not found.", 404)
			target = {
				"url": resolve_service_url(portal, ctx.env, fallback=portal.local_url),
				"auth_type": "none",
				"api_key": None,
				"timeout": None,
			}
			service_type = portal.service_type

		kwargs = {"auth_type": target["auth_type"], "api_key": target["api_key"], "service_type": service_type}
		if target["timeout"]:
			kwargs["timeout_ms"] = target["timeout"]
		result = check_service_connection(service_key, target["url"], **kwargs)

		if row:
			try:
				ctx.interface.update_service(service_key, map_update_service_to_update(
					{"status": result.status, "last_health_check": datetime.now(timezone.utc)},
					admin["id"],
				))
			except SupabaseError as e:
				logger.warning("Could not store health check for %s: %s", service_key, e)

		return flask.jsonify({"ok": True, "data": result.to_dict()})
