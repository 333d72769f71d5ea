from __future__ import annotations

import logging
import time

import requests

from util.services.constants import CONNECTION_TEST_TIMEOUT, HEALTH_CHECK_ENDPOINTS
from util.services.schema import ServiceHealthCheck

logger = logging.getLogger(__name__)


def build_health_url(url: str, service_type: str | None) -> str:
	endpoint = HEALTH_CHECK_ENDPOINTS.get(service_type or "", "")
	if not endpoint:
		return url
	return url.rstrip("/") + endpoint


def _auth_kwargs(auth_type: str, api_key: str | None) -> dict:
	if not api_key or auth_type == "none":
		return {}
	if auth_type == "api_key":
		return {"headers": {"X-Api-Key": api_key}}
	if auth_type == "basic_auth":
		# Stored as "username:password".
		user, _, password = api_key.partition(":")
		return {"auth": (user, password)}
	if auth_type == "oauth":
		return {"headers": {"Authorization": f"Bearer {api_key}"}}
	return {}


def check_service_connection(
	service_id: str,
	url: str,
	*,
	auth_type: str = "none",
	api_key: str | None = None,
	timeout_ms: int = CONNECTION_TEST_TIMEOUT["DEFAULT"],
	service_type: str | None = None,
	session: requests.Session | None = None,
) -> ServiceHealthCheck:
	"""
	Check a service's health endpoint. Never raises: transport problems are
	reported as an offline status with an error message.
	"""
	target = build_health_url(url, service_type)
	http = session or requests
	started = time.perf_counter()
	try:
		resp = http.get(
			target,
			timeout=timeout_ms / 1000.0,
			allow_redirects=True,
			**_auth_kwargs(auth_type, api_key),
		)
	except requests.Timeout:
		logger.info("Health check for %s timed out after %sms", service_id, timeout_ms)
		return ServiceHealthCheck(id=service_id, status="offline", error_message="Connection timed out.")
	except requests.RequestException as e:
		logger.info("Health check for %s failed: %s", service_id, e)
		return ServiceHealthCheck(id=service_id, status="offline", error_message=str(e))

	elapsed_ms = round((time.perf_counter() - started) * 1000.0, 1)
	if resp.status_code in (401, 403):
		return ServiceHealthCheck(
			id=service_id,
			status="error",
			response_time_ms=elapsed_ms,
			error_message="Authentication failed.",
		)
	if resp.status_code >= 400:
		return ServiceHealthCheck(
			id=service_id,
			status="error",
			response_time_ms=elapsed_ms,
			error_message=f"Unexpected status {resp.status_code}.",
		)
	return ServiceHealthCheck(id=service_id, status="online", response_time_ms=elapsed_ms)
