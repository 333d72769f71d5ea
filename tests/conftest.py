from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace

import flask
import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
	sys.path.insert(0, str(SRC_ROOT))

ADMIN_ID = "11111111-1111-4111-8111-111111111111"
USER_ID = "22222222-2222-4222-8222-222222222222"


@pytest.fixture
def app_factory():
	def _build(register_fn, ctx):
		app = flask.Flask(__name__)
		bp = flask.Blueprint("api", __name__)
		register_fn(bp, ctx)
		app.register_blueprint(bp)
		app.config["TESTING"] = True
		return app

	return _build


@pytest.fixture
def simple_ctx():
	return SimpleNamespace(
		auth_token_name="sb-access-token",
		interface=SimpleNamespace(client=SimpleNamespace()),
		fcr=SimpleNamespace(find=lambda _: None),
		env={},
	)


@pytest.fixture
def as_admin(monkeypatch):
	"""Patch require_admin in a handler module so requests pass as ADMIN_ID."""
	def _patch(module):
		monkeypatch.setattr(module, "require_admin", lambda ctx: ({"id": ADMIN_ID, "email": "admin@example.com"}, None))
	return _patch
