from __future__ import annotations

from types import SimpleNamespace

import flask

from util.base_url import get_site_url


def test_get_site_url_prefers_env():
	fcr = SimpleNamespace(find=lambda _: {"SITE_URL": "https://from-config.example"})
	env = {"SITE_URL": "https://from-env.example/"}
	assert get_site_url(fcr=fcr, env=env) == "https://from-env.example"


def test_get_site_url_accepts_public_env_name():
	env = {"NEXT_PUBLIC_SITE_URL": "https://public.example"}
	assert get_site_url(fcr=None, env=env) == "https://public.example"


def test_get_site_url_uses_portal_conf():
	fcr = SimpleNamespace(find=lambda _: {"SITE_URL": "https://portal.example"})
	assert get_site_url(fcr=fcr, env={}) == "https://portal.example"


def test_get_site_url_falls_back_to_default():
	fcr = SimpleNamespace(find=lambda _: {})
	assert get_site_url(fcr=fcr, env={}, default="http://fallback.local") == "http://fallback.local"


def test_get_site_url_uses_flask_request_host():
	app = flask.Flask(__name__)
	with app.test_request_context("/", base_url="https://example.test:8443"):
		assert get_site_url(fcr=None, env={}) == "https://example.test:8443"


def test_get_site_url_ignores_loopback_config_when_request_is_public():
	app = flask.Flask(__name__)
	with app.test_request_context("/", base_url="https://prod.example.com"):
		env = {"SITE_URL": "http://localhost:3000"}
		assert get_site_url(fcr=None, env=env) == "https://prod.example.com"


def test_get_site_url_prefers_forwarded_host_when_config_is_loopback():
	app = flask.Flask(__name__)
	with app.test_request_context(
		"/",
		base_url="http://127.0.0.1:5000",
		headers={"X-Forwarded-Host": "app.example.com", "X-Forwarded-Proto": "https"},
	):
		env = {"SITE_URL": "http://localhost:3000"}
		assert get_site_url(fcr=None, env=env) == "https://app.example.com"


def test_get_site_url_keeps_public_config_over_request():
	app = flask.Flask(__name__)
	with app.test_request_context("/", base_url="https://other.example.com"):
		env = {"SITE_URL": "https://portal.example.com"}
		assert get_site_url(fcr=None, env=env) == "https://portal.example.com"
