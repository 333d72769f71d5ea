from __future__ import annotations

import logging

import flask

from app.api_context import ApiContext
from app.api_common import (
	CODE_VERIFIER_COOKIE,
	CODE_VERIFIER_MAX_AGE,
	REMEMBER_ME_MAX_AGE,
	SESSION_MAX_AGE,
	clear_session_cookies,
	get_request_token,
	get_site_url,
	json_error,
	request_data,
	require_user,
	set_auth_cookie,
	set_session_cookies,
	text_field,
)
from sql.supabase_client import SupabaseError, generate_pkce_pair

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
PASSWORD_RESET_MESSAGE = "If an account exists for that email, a password reset link has been sent."


def _credentials(data: dict) -> tuple[str, str]:
	email = text_field(data, "email").lower()
	password = text_field(data, "password", strip=False)
	return email, password


def _callback_url(ctx: ApiContext, next_path: str) -> str:
	return f"{get_site_url(ctx)}/auth/callback?next={next_path}"


def register(api: flask.Blueprint, ctx: ApiContext) -> None:
	@api.route("/api/auth/sign-in", methods=["POST"])
	def api_auth_sign_in():
		data = request_data()
		email, password = _credentials(data)
		if not email or not password:
			return json_error("Email and password are required.", 400)

		try:
			session = ctx.interface.client.sign_in_with_password(email, password)
		except SupabaseError as e:
			logger.info("Sign-in failed for %s: %s", email, e)
			return json_error("Invalid email or password.", 401)
		if not session.get("access_token"):
			return json_error("Invalid email or password.", 401)

		remember = bool(data.get("remember_me"))
		resp = flask.make_response(flask.jsonify({"ok": True, "message": "Signed in."}))
		max_age = REMEMBER_ME_MAX_AGE if remember else int(session.get("expires_in") or SESSION_MAX_AGE)
		set_session_cookies(resp, ctx, session, max_age, remember=remember)
		return resp, 200

	@api.route("/api/auth/sign-up", methods=["POST"])
	def api_auth_sign_up():
		data = request_data()
		email, password = _credentials(data)
		repeat = data.get("repeat_password")
		if not email or "@" not in email:
			return json_error("A valid email is required.", 400)
		if len(password) < MIN_PASSWORD_LENGTH:
			return json_error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", 400)
		if repeat is not None and repeat != password:
			return json_error("Passwords do not match.", 400)

		verifier, challenge = generate_pkce_pair()
		try:
			ctx.interface.client.sign_up(
				email,
				password,
				redirect_to=_callback_url(ctx, "/home"),
				code_challenge=challenge,
			)
		except SupabaseError as e:
			logger.info("Sign-up failed for %s: %s", email, e)
			return json_error(str(e), 400)
		logger.info("New account registered: %s (pending approval)", email)
		resp = flask.make_response(flask.jsonify({
			"ok": True,
			"message": "Account created. Confirm your email, then wait for an administrator to approve your account.",
		}))
		set_auth_cookie(resp, CODE_VERIFIER_COOKIE, verifier, CODE_VERIFIER_MAX_AGE)
		return resp

	@api.route("/api/auth/sign-out", methods=["POST"])
	def api_auth_sign_out():
		token = get_request_token(ctx)
		if token:
			ctx.interface.forget_access_token(token)
			try:
				ctx.interface.client.sign_out(token)
			except SupabaseError as e:
				logger.info("Remote sign-out failed: %s", e)
		resp = flask.make_response(flask.jsonify({"ok": True, "message": "Signed out."}))
		clear_session_cookies(resp, ctx)
		return resp

	@api.route("/api/auth/password-reset", methods=["POST"])
	def api_auth_password_reset():
		email = text_field(request_data(), "email").lower()
		if not email or "@" not in email:
			return json_error("A valid email is required.", 400)
		verifier, challenge = generate_pkce_pair()
		try:
			ctx.interface.client.recover(
				email,
				redirect_to=_callback_url(ctx, "/update-password"),
				code_challenge=challenge,
			)
		except SupabaseError as e:
			logger.warning("Password reset request for %s failed: %s", email, e)
		# Same answer and cookie whether or not the account exists.
		resp = flask.make_response(flask.jsonify({"ok": True, "message": PASSWORD_RESET_MESSAGE}))
		set_auth_cookie(resp, CODE_VERIFIER_COOKIE, verifier, CODE_VERIFIER_MAX_AGE)
		return resp

	@api.route("/api/auth/update-password", methods=["POST"])
	def api_auth_update_password():
		user, err = require_user(ctx)
		if err:
			return err
		data = request_data()
		password = text_field(data, "password", strip=False)
		confirm = text_field(data, "confirm_password", strip=False)
		if not password or not confirm:
			return json_error("Please fill out both password fields.", 400)
		if password != confirm:
			return json_error("Passwords do not match.", 400)
		if len(password) < MIN_PASSWORD_LENGTH:
			return json_error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", 400)

		try:
			ctx.interface.client.update_user(get_request_token(ctx), {"password": password})
		except SupabaseError as e:
			logger.warning("Password update failed for %s: %s", user.get("id"), e)
			return json_error(str(e), 400)
		return flask.jsonify({"ok": True, "message": "Password updated."})
