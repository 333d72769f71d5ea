from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

from util.services.schema import Service, UserProvisioningConfig

# Service attribute -> services table column, for fields that are copied as-is.
_COLUMN_FOR_FIELD = {
	"name": "name",
	"description": "description",
	"url": "url",
	"api_key": "api_key",
	"enabled": "enabled",
	"auto_provision": "auto_provision",
	"status": "status",
	"health_check_interval": "health_check_interval",
	"category": "category",
	"service_type": "service_type",
	"auth_type": "auth_type",
	"requires_auth": "requires_auth",
	"ssl_enabled": "ssl_enabled",
	"supports_user_provisioning": "supports_user_provisioning",
	"default_user_role": "default_user_role",
	"version": "version",
	"icon": "icon",
	"documentation": "documentation",
	"tags": "tags",
}


def _parse_ts(value: Any) -> datetime | None:
	if value is None or value == "":
		return None
	if isinstance(value, datetime):
		return value
	text = str(value)
	if text.endswith("Z"):
		text = text[:-1] + "+00:00"
	return datetime.fromisoformat(text)


def _iso(value: datetime | None) -> str | None:
	return value.isoformat() if value is not None else None


def _provisioning_to_json(config: UserProvisioningConfig | dict | None) -> dict | None:
	if config is None:
		return None
	if isinstance(config, UserProvisioningConfig):
		return config.to_dict()
	return copy.deepcopy(config)


def map_service_row_to_service(row: dict) -> Service:
	"""Convert a services table row into a Service."""
	return Service(
		id=row["service_key"],
		name=row["name"],
		description=row.get("description") or "",
		url=row["url"],
		api_key=row.get("api_key") or None,
		enabled=bool(row.get("enabled")),
		auto_provision=bool(row.get("auto_provision")),
		status=row.get("status") or "unknown",
		last_health_check=_parse_ts(row.get("last_health_check")),
		health_check_interval=row.get("health_check_interval") or 30,
		category=row["category"],
		service_type=row["service_type"],
		auth_type=row.get("auth_type") or "none",
		requires_auth=bool(row.get("requires_auth")),
		ssl_enabled=bool(row.get("ssl_enabled")),
		supports_user_provisioning=bool(row.get("supports_user_provisioning")),
		user_provisioning_config=UserProvisioningConfig.from_dict(
			copy.deepcopy(row.get("user_provisioning_config"))
		),
		default_user_role=row.get("default_user_role") or None,
		version=row.get("version") or None,
		icon=row.get("icon") or None,
		documentation=row.get("documentation") or None,
		tags=list(row.get("tags") or []),
		account_id=row["account_id"],
		created_at=_parse_ts(row.get("created_at")) or datetime.now(timezone.utc),
		updated_at=_parse_ts(row.get("updated_at")) or datetime.now(timezone.utc),
		created_by=row["created_by"],
		updated_by=row["updated_by"],
	)


def map_create_service_to_insert(service: Service) -> dict:
	"""Convert a new Service into an insert payload (timestamps are left to the database)."""
	row = {"service_key": service.id}
	for attr, column in _COLUMN_FOR_FIELD.items():
		row[column] = getattr(service, attr)
	row["tags"] = list(service.tags)
	row["last_health_check"] = _iso(service.last_health_check)
	row["user_provisioning_config"] = _provisioning_to_json(service.user_provisioning_config)
	row["account_id"] = service.account_id
	row["created_by"] = service.created_by
	row["updated_by"] = service.updated_by
	return row


def map_update_service_to_update(
	changes: dict,
	updated_by: str,
	*,
	updated_at: datetime | None = None,
) -> dict:
	"""
	Convert a partial update (Service attribute names) into an update payload.
	Only keys present in changes are included.
	"""
	update = {
		"updated_by": updated_by,
		"updated_at": _iso(updated_at or datetime.now(timezone.utc)),
	}
	for attr, column in _COLUMN_FOR_FIELD.items():
		if attr in changes:
			update[column] = changes[attr]
	if "last_health_check" in changes:
		ts = changes["last_health_check"]
		update["last_health_check"] = _iso(ts) if isinstance(ts, datetime) else ts
	if "user_provisioning_config" in changes:
		update["user_provisioning_config"] = _provisioning_to_json(changes["user_provisioning_config"])
	return update
