from __future__ import annotations

import logging
from typing import Any

import flask

from app.api_context import ApiContext
from sql.supabase_client import SupabaseError
from util.base_url import get_site_url as resolve_site_url

logger = logging.getLogger(__name__)

SESSION_MAX_AGE = 24 * 60 * 60
REMEMBER_ME_MAX_AGE = 30 * 24 * 60 * 60
CODE_VERIFIER_COOKIE = "sb-code-verifier"
CODE_VERIFIER_MAX_AGE = 60 * 60


def json_error(message: str, status: int) -> tuple[Any, int]:
	return flask.jsonify({"ok": False, "message": message}), status


def get_request_token(ctx: ApiContext) -> str | None:
	refreshed = flask.g.get("refreshed_access_token")
	if refreshed:
		return refreshed
	token = flask.request.cookies.get(ctx.auth_token_name)
	if token:
		return token
	auth = flask.request.headers.get("Authorization") or ""
	if auth.lower().startswith("bearer "):
		return auth[7:].strip() or None
	return None


def refresh_token_name(ctx: ApiContext) -> str:
	name = ctx.auth_token_name
	return name.replace("access", "refresh") if "access" in name else f"{name}-refresh"


def set_auth_cookie(resp: flask.Response, name: str, value: str, max_age: int) -> None:
	resp.set_cookie(
		key=name,
		value=value,
		httponly=True,
		secure=True,
		samesite="Lax",
		max_age=max_age,
		path="/",
	)


def set_session_cookies(resp: flask.Response, ctx: ApiContext, session: dict, max_age: int, *, remember: bool = False) -> None:
	"""Access token always; the refresh token only for remembered sessions."""
	set_auth_cookie(resp, ctx.auth_token_name, session.get("access_token") or "", max_age)
	if remember and session.get("refresh_token"):
		set_auth_cookie(resp, refresh_token_name(ctx), session["refresh_token"], max_age)


def clear_session_cookies(resp: flask.Response, ctx: ApiContext) -> None:
	set_auth_cookie(resp, ctx.auth_token_name, "", 0)
	set_auth_cookie(resp, refresh_token_name(ctx), "", 0)


def request_data() -> dict:
	"""A JSON object body, else the submitted form fields. Anything else reads as empty."""
	data = flask.request.get_json(silent=True)
	if isinstance(data, dict):
		return data
	if flask.request.is_json:
		return {}
	return flask.request.form.to_dict()


def text_field(data: dict, key: str, *, strip: bool = True) -> str:
	value = data.get(key)
	if not isinstance(value, str):
		return ""
	return value.strip() if strip else value


def get_request_user(ctx: ApiContext) -> dict | None:
	token = get_request_token(ctx)
	if not token:
		return None
	try:
		return ctx.interface.get_user_by_access_token(token)
	except SupabaseError as e:
		logger.warning("Failed to resolve session token: %s", e)
		return None


def require_user(ctx: ApiContext) -> tuple[dict | None, tuple[Any, int] | None]:
	token = get_request_token(ctx)
	if not token:
		return None, json_error("Authentication required.", 401)
	try:
		user = ctx.interface.get_user_by_access_token(token)
	except SupabaseError as e:
		logger.warning("Session lookup unavailable: %s", e)
		return None, json_error("Session service unavailable.", 503)
	if not user:
		return None, json_error("Invalid session.", 401)
	return user, None


def require_admin(ctx: ApiContext) -> tuple[dict | None, tuple[Any, int] | None]:
	"""Re-checks the role against the store on every call; the session cache is not trusted for it."""
	user, err = require_user(ctx)
	if err:
		return None, err
	if not ctx.interface.is_admin(user.get("id")):
		return None, json_error("Admin access required.", 403)
	return user, None


def get_current_user_account(ctx: ApiContext) -> dict | None:
	user = get_request_user(ctx)
	if not user:
		return None
	try:
		return ctx.interface.get_account(user["id"])
	except Exception as e:
		logger.error("Error getting user account data: %s", e)
		return None


def get_current_user_admin_status(ctx: ApiContext) -> bool:
	account = get_current_user_account(ctx)
	return bool(account) and account.get("account_type") == "admin"


def get_current_user_moderator_status(ctx: ApiContext) -> bool:
	account = get_current_user_account(ctx)
	return bool(account) and account.get("account_type") in ("admin", "moderator")


def get_current_user_approval_status(ctx: ApiContext) -> bool:
	account = get_current_user_account(ctx)
	return bool(account) and account.get("approval_status") == "approved"


def get_site_url(ctx: ApiContext) -> str:
	return resolve_site_url(fcr=ctx.fcr, env=ctx.env)


def fetch_user_account_data(ctx: ApiContext, user_id: str) -> tuple[dict | None, str | None]:
	try:
		data = ctx.interface.get_account_contact(user_id)
	except Exception as e:
		return None, str(e)
	if not data:
		return None, "Account not found."
	return data, None
