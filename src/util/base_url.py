from __future__ import annotations

import os
from typing import Mapping
from urllib.parse import urlparse

import flask

from util.fcr.file_config_reader import FileConfigReader

SITE_URL_KEYS = ("SITE_URL", "NEXT_PUBLIC_SITE_URL")
DEFAULT_SITE_URL = "http://localhost:3000"


def _is_loopback_url(url: str) -> bool:
	try:
		host = (urlparse(url).hostname or "").strip().lower()
	except ValueError:
		return False
	return host in {"localhost", "127.0.0.1", "::1"}


def _configured_site_url(fcr: FileConfigReader | None, env: Mapping[str, str]) -> str:
	for key in SITE_URL_KEYS:
		val = (env.get(key) or "").strip()
		if val:
			return val.rstrip("/")
	if fcr is not None:
		conf = fcr.find("portal.conf")
		if isinstance(conf, dict):
			for key in SITE_URL_KEYS:
				val = (conf.get(key) or "").strip()
				if val:
					return val.rstrip("/")
	return ""


def _request_site_url() -> str:
	fwd_host = (flask.request.headers.get("X-Forwarded-Host") or "").split(",")[0].strip()
	if fwd_host:
		fwd_proto = (flask.request.headers.get("X-Forwarded-Proto") or "").strip() or "https"
		return f"{fwd_proto}://{fwd_host}"
	return (flask.request.host_url or "").rstrip("/")


def get_site_url(
	*,
	fcr: FileConfigReader | None = None,
	env: Mapping[str, str] | None = None,
	default: str = DEFAULT_SITE_URL,
) -> str:
	"""
	Public URL of the portal, used in email links.

	Environment beats portal.conf. A loopback configured URL is ignored in
	favour of the live request host when the request came in on a public host.
	"""
	env_vars = env if env is not None else os.environ
	configured = _configured_site_url(fcr, env_vars)

	if flask.has_request_context():
		live = _request_site_url()
		if live and not _is_loopback_url(live) and (not configured or _is_loopback_url(configured)):
			return live
		if not configured and live:
			return live

	return configured or default
