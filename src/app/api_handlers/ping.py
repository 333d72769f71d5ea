from __future__ import annotations

import flask

from app.api_context import ApiContext


def register(api: flask.Blueprint, ctx: ApiContext) -> None:
	@api.route("/api/ping")
	def api_ping():
		return flask.jsonify({"ok": True, "message": "pong"})

	@api.route("/api/health")
	def api_health():
		client = ctx.interface.client
		configured = bool(getattr(client, "url", "") and getattr(client, "service_role_key", ""))
		return flask.jsonify({"ok": True, "backend_configured": configured})
