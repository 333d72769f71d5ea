from __future__ import annotations

import flask

from app.api_context import ApiContext
from app.api_common import get_request_user
from util.navbars.visibility import build_navigation_for


def register(api: flask.Blueprint, ctx: ApiContext) -> None:
	@api.route("/api/navigation")
	def api_navigation():
		user = get_request_user(ctx)
		is_admin = bool(user) and ctx.interface.is_admin(user.get("id"))
		return flask.jsonify({"ok": True, "data": build_navigation_for(is_admin, ctx.fcr)})
