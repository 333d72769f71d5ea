from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from util.services.constants import (
	AUTH_TYPES,
	CONNECTION_TEST_TIMEOUT,
	HEALTH_CHECK_INTERVALS,
	SERVICE_CATEGORY_NAMES,
	SERVICE_STATUSES,
	SERVICE_TYPES,
	SERVICE_VALIDATION,
)


class ServiceValidationError(ValueError):
	def __init__(self, errors: dict[str, str]):
		self.errors = errors
		detail = "; ".join(f"{k}: {v}" for k, v in errors.items())
		super().__init__(f"Invalid service: {detail}")


@dataclass
class UserProvisioningConfig:
	endpoint: str | None = None
	default_role: str | None = None
	create_groups: bool = False
	sync_user_data: bool = True
	custom_fields: dict[str, Any] | None = None

	@classmethod
	def from_dict(cls, data: dict | None) -> "UserProvisioningConfig | None":
		if data is None:
			return None
		return cls(
			endpoint=data.get("endpoint"),
			default_role=data.get("defaultRole", data.get("default_role")),
			create_groups=bool(data.get("createGroups", data.get("create_groups", False))),
			sync_user_data=bool(data.get("syncUserData", data.get("sync_user_data", True))),
			custom_fields=data.get("customFields", data.get("custom_fields")),
		)

	def to_dict(self) -> dict:
		out = {
			"createGroups": self.create_groups,
			"syncUserData": self.sync_user_data,
		}
		if self.endpoint is not None:
			out["endpoint"] = self.endpoint
		if self.default_role is not None:
			out["defaultRole"] = self.default_role
		if self.custom_fields is not None:
			out["customFields"] = self.custom_fields
		return out


@dataclass
class Service:
	id: str
	name: str
	description: str
	url: str
	category: str
	service_type: str
	account_id: str
	created_by: str
	updated_by: str
	api_key: str | None = None
	enabled: bool = True
	auto_provision: bool = False
	status: str = "unknown"
	last_health_check: datetime | None = None
	health_check_interval: int = HEALTH_CHECK_INTERVALS["DEFAULT"]
	auth_type: str = "none"
	requires_auth: bool = False
	ssl_enabled: bool = False
	supports_user_provisioning: bool = False
	user_provisioning_config: UserProvisioningConfig | None = None
	default_user_role: str | None = None
	version: str | None = None
	icon: str | None = None
	documentation: str | None = None
	tags: list[str] = field(default_factory=list)
	created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
	updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

	def to_dict(self, *, mask_api_key: str | None = None) -> dict:
		out = asdict(self)
		out["user_provisioning_config"] = (
			self.user_provisioning_config.to_dict() if self.user_provisioning_config else None
		)
		for key in ("last_health_check", "created_at", "updated_at"):
			if isinstance(out[key], datetime):
				out[key] = out[key].isoformat()
		if mask_api_key is not None and out.get("api_key"):
			out["api_key"] = mask_api_key
		return out


@dataclass
class ServiceHealthCheck:
	id: str
	status: str
	response_time_ms: float | None = None
	last_checked: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
	error_message: str | None = None

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"status": self.status,
			"responseTime": self.response_time_ms,
			"lastChecked": self.last_checked.isoformat(),
			"errorMessage": self.error_message,
		}


def _is_http_url(value: Any) -> bool:
	if not isinstance(value, str):
		return False
	try:
		parsed = urlparse(value)
	except ValueError:
		return False
	return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _is_uuid(value: Any) -> bool:
	try:
		uuid.UUID(str(value))
	except (TypeError, ValueError):
		return False
	return True


_REQUIRED_ON_CREATE = (
	"id", "name", "description", "url", "category", "service_type",
	"account_id", "created_by", "updated_by",
)
_BOOL_FIELDS = (
	"enabled", "auto_provision", "requires_auth", "ssl_enabled", "supports_user_provisioning",
)
_DEFAULTS = {
	"enabled": True,
	"auto_provision": False,
	"status": "unknown",
	"health_check_interval": HEALTH_CHECK_INTERVALS["DEFAULT"],
	"auth_type": "none",
	"requires_auth": False,
	"ssl_enabled": False,
	"supports_user_provisioning": False,
	"tags": [],
}


def _check_length(errors: dict, data: dict, key: str, min_len: int | None, max_len: int) -> None:
	if key not in data or data[key] is None:
		return
	val = data[key]
	if not isinstance(val, str):
		errors[key] = "must be a string"
		return
	if min_len is not None and len(val) < min_len:
		errors[key] = f"must be at least {min_len} characters"
	elif len(val) > max_len:
		errors[key] = f"must be at most {max_len} characters"


def validate_service(data: dict, *, partial: bool = False) -> dict:
	"""
	Validate a service payload (snake_case keys) and return a cleaned copy.

	With partial=False every required field must be present and defaults are
	filled in. With partial=True only id and updated_by are required and only
	the supplied fields are checked.
	"""
	errors: dict[str, str] = {}
	required = ("id", "updated_by") if partial else _REQUIRED_ON_CREATE
	for key in required:
		if data.get(key) is None or (key != "description" and data.get(key) == ""):
			errors[key] = "is required"

	cleaned = dict(data)
	if not partial:
		for key, default in _DEFAULTS.items():
			if cleaned.get(key) is None:
				cleaned[key] = list(default) if isinstance(default, list) else default

	_check_length(errors, cleaned, "id", SERVICE_VALIDATION["ID_MIN_LENGTH"], SERVICE_VALIDATION["ID_MAX_LENGTH"])
	_check_length(errors, cleaned, "name", SERVICE_VALIDATION["NAME_MIN_LENGTH"], SERVICE_VALIDATION["NAME_MAX_LENGTH"])
	_check_length(errors, cleaned, "description", None, SERVICE_VALIDATION["DESCRIPTION_MAX_LENGTH"])
	_check_length(errors, cleaned, "default_user_role", None, SERVICE_VALIDATION["USER_ROLE_MAX_LENGTH"])
	_check_length(errors, cleaned, "version", None, SERVICE_VALIDATION["VERSION_MAX_LENGTH"])

	if "url" in cleaned and cleaned["url"] is not None and not _is_http_url(cleaned["url"]):
		errors["url"] = "must be a valid URL"
	if cleaned.get("documentation") is not None and not _is_http_url(cleaned["documentation"]):
		errors["documentation"] = "must be a valid URL"

	enum_checks = (
		("status", SERVICE_STATUSES),
		("category", SERVICE_CATEGORY_NAMES),
		("service_type", SERVICE_TYPES),
		("auth_type", AUTH_TYPES),
	)
	for key, allowed in enum_checks:
		if cleaned.get(key) is not None and cleaned[key] not in allowed:
			errors[key] = f"must be one of {', '.join(allowed)}"

	if "health_check_interval" in cleaned and cleaned["health_check_interval"] is not None:
		interval = cleaned["health_check_interval"]
		if isinstance(interval, bool) or not isinstance(interval, int):
			errors["health_check_interval"] = "must be an integer"
		elif not HEALTH_CHECK_INTERVALS["MIN"] <= interval <= HEALTH_CHECK_INTERVALS["MAX"]:
			errors["health_check_interval"] = (
				f"must be between {HEALTH_CHECK_INTERVALS['MIN']} and {HEALTH_CHECK_INTERVALS['MAX']}"
			)

	for key in _BOOL_FIELDS:
		if key in cleaned and cleaned[key] is not None and not isinstance(cleaned[key], bool):
			errors[key] = "must be a boolean"

	for key in ("account_id", "created_by", "updated_by"):
		if cleaned.get(key) and not _is_uuid(cleaned[key]):
			errors[key] = "must be a UUID"

	if "tags" in cleaned and cleaned["tags"] is not None:
		tags = cleaned["tags"]
		if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
			errors["tags"] = "must be a list of strings"

	if "user_provisioning_config" in cleaned and isinstance(cleaned["user_provisioning_config"], dict):
		upc = UserProvisioningConfig.from_dict(cleaned["user_provisioning_config"])
		if upc.endpoint is not None and not _is_http_url(upc.endpoint):
			errors["user_provisioning_config"] = "endpoint must be a valid URL"
		cleaned["user_provisioning_config"] = upc

	if errors:
		raise ServiceValidationError(errors)
	return cleaned


def build_service(data: dict) -> Service:
	return Service(**validate_service(data))


def validate_connection_test(data: dict) -> dict:
	errors: dict[str, str] = {}
	url = data.get("url")
	if not _is_http_url(url):
		errors["url"] = "must be a valid URL"
	auth_type = data.get("auth_type", "none")
	if auth_type not in AUTH_TYPES:
		errors["auth_type"] = f"must be one of {', '.join(AUTH_TYPES)}"
	timeout = data.get("timeout")
	if timeout is None:
		timeout = CONNECTION_TEST_TIMEOUT["DEFAULT"]
	if isinstance(timeout, bool) or not isinstance(timeout, int):
		errors["timeout"] = "must be an integer"
	elif not CONNECTION_TEST_TIMEOUT["MIN"] <= timeout <= CONNECTION_TEST_TIMEOUT["MAX"]:
		errors["timeout"] = (
			f"must be between {CONNECTION_TEST_TIMEOUT['MIN']} and {CONNECTION_TEST_TIMEOUT['MAX']}"
		)
	if errors:
		raise ServiceValidationError(errors)
	return {
		"url": url,
		"auth_type": auth_type,
		"api_key": data.get("api_key"),
		"timeout": timeout,
	}
