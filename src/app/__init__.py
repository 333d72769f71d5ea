# __init__.py
import os
import logging
from flask import Flask, request, g

from app.api import build_api, build_context
from app.api_common import (
	REMEMBER_ME_MAX_AGE,
	clear_session_cookies,
	get_request_token,
	refresh_token_name,
	set_session_cookies,
)
from app.api_context import ApiContext
from app.routes import main
from sql.supabase_client import SupabaseError

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
	level_name = (os.environ.get("LOG_LEVEL") or "INFO").upper()
	logging.basicConfig(
		level=getattr(logging, level_name, logging.INFO),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)


def create_app(ctx: ApiContext | None = None):
	# Standard Flask application factory
	_configure_logging()
	app = Flask(
		__name__,
		static_folder="../static",
	)

	ctx = ctx or build_context()
	app.config["API_CONTEXT"] = ctx
	app.register_blueprint(main)
	app.register_blueprint(build_api(ctx))

	@app.before_request
	def load_session_user():
		"""
		Before each request, resolve the access-token cookie. If valid, set g.user.
		A rejected token is swapped for a fresh one when a refresh cookie is present.
		"""
		g.user = None
		g.clear_token = False
		g.new_session = None

		token = get_request_token(ctx)
		refresh = request.cookies.get(refresh_token_name(ctx))
		if not token and not refresh:
			return

		if token:
			try:
				user = ctx.interface.get_user_by_access_token(token)
			except SupabaseError as e:
				# Backend unreachable; the cookie may still be good.
				logger.warning("Session lookup unavailable, keeping cookie: %s", e)
				return
			if user:
				g.user = user
				return

		if refresh and _refresh_session(refresh):
			return

		g.clear_token = request.cookies.get(ctx.auth_token_name) is not None or refresh is not None
		logger.debug("Invalid or expired access token in request.")

	def _refresh_session(refresh: str) -> bool:
		try:
			session = ctx.interface.client.refresh_session(refresh)
			access = session.get("access_token")
			user = ctx.interface.get_user_by_access_token(access) if access else None
		except SupabaseError as e:
			if e.status_code is None or e.status_code >= 500:
				# Not a rejection, so the cookies stay.
				logger.warning("Session refresh unavailable, keeping cookies: %s", e)
				return True
			logger.info("Refresh token rejected: %s", e)
			return False
		if not user:
			return False
		g.user = user
		g.new_session = session
		g.refreshed_access_token = access
		logger.debug("Refreshed session for %s", user.get("id"))
		return True

	@app.after_request
	def sync_session_cookies(response):
		"""
		After each request, store a refreshed session or flush a rejected one,
		unless the view already wrote the session cookie itself.
		"""
		prefix = f"{ctx.auth_token_name}="
		if any(h.startswith(prefix) for h in response.headers.getlist("Set-Cookie")):
			return response
		if getattr(g, "new_session", None):
			set_session_cookies(response, ctx, g.new_session, REMEMBER_ME_MAX_AGE, remember=True)
		elif getattr(g, "clear_token", False):
			clear_session_cookies(response, ctx)
			logger.debug("Cleared invalid access token cookie.")
		return response

	return app
