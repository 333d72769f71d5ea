import functools
import logging
import os

import flask

from app.api_common import (
	CODE_VERIFIER_COOKIE,
	SESSION_MAX_AGE,
	get_request_user,
	set_auth_cookie,
	set_session_cookies,
)
from app.api_context import ApiContext
from app.api_handlers.services import load_service_settings
from sql.supabase_client import SupabaseError
from util.navbars.visibility import build_navigation_for
from util.services.catalog import get_featured_services, get_portal_services, summarize_status
from util.user_approval import create_user_approval_service
from util.webpage_builder.webpage_builder import (
	build_admin_services_page,
	build_admin_users_page,
	build_error_page,
	build_home_page,
	build_landing_page,
	build_password_reset_page,
	build_sign_in_page,
	build_sign_up_page,
	build_update_password_page,
)

logger = logging.getLogger(__name__)
main = flask.Blueprint("main", __name__)

SIGN_IN_PATH = "/auth/sign-in"
HOME_PATH = "/home"

# endpoint name -> access level and redirect targets
PAGE_ACCESS_REQUIREMENTS: dict[str, dict[str, str]] = {}


def _ctx() -> ApiContext:
	return flask.current_app.config["API_CONTEXT"]


def _current_user() -> dict | None:
	if "user" in flask.g:
		return flask.g.user
	flask.g.user = get_request_user(_ctx())
	return flask.g.user


def _is_admin(user: dict | None) -> bool:
	if "is_admin" not in flask.g:
		flask.g.is_admin = bool(user) and _ctx().interface.is_admin(user.get("id"))
	return flask.g.is_admin


def _record(fn, level: str, **redirects: str) -> None:
	PAGE_ACCESS_REQUIREMENTS[fn.__name__] = {"level": level, **redirects}


def require_auth(unauth_redirect: str = SIGN_IN_PATH):
	def decorator(fn):
		_record(fn, "auth", unauth_redirect=unauth_redirect)

		@functools.wraps(fn)
		def wrapper(*args, **kwargs):
			if not _current_user():
				return flask.redirect(unauth_redirect)
			return fn(*args, **kwargs)
		return wrapper
	return decorator


def require_anon(auth_redirect: str = HOME_PATH):
	def decorator(fn):
		_record(fn, "anon", auth_redirect=auth_redirect)

		@functools.wraps(fn)
		def wrapper(*args, **kwargs):
			if _current_user():
				return flask.redirect(auth_redirect)
			return fn(*args, **kwargs)
		return wrapper
	return decorator


def require_admin_access(fn):
	"""Anonymous visitors go to sign-in; signed-in non-admins go back to /home."""
	_record(fn, "admin", unauth_redirect=SIGN_IN_PATH, auth_redirect=HOME_PATH)

	@functools.wraps(fn)
	def wrapper(*args, **kwargs):
		user = _current_user()
		if not user:
			return flask.redirect(SIGN_IN_PATH)
		if not _is_admin(user):
			logger.info("Non-admin %s redirected away from %s", user.get("id"), flask.request.path)
			return flask.redirect(HOME_PATH)
		return fn(*args, **kwargs)
	return wrapper


def _navigation() -> list[dict]:
	return build_navigation_for(_is_admin(_current_user()), _ctx().fcr).get("routes") or []


@main.route("/")
def landing_page():
	app_name = os.environ.get("APP_NAME") or "Marnix 13"
	return build_landing_page(app_name, get_featured_services(_ctx().env))


@main.route("/auth/sign-in")
@require_anon()
def sign_in_page():
	return build_sign_in_page()


@main.route("/auth/sign-up")
@require_anon()
def sign_up_page():
	return build_sign_up_page()


@main.route("/auth/password-reset")
@require_anon()
def password_reset_page():
	return build_password_reset_page()


def _safe_next(path: str | None) -> str:
	if path and path.startswith("/") and not path.startswith("//"):
		return path
	return HOME_PATH


def _callback_session(args) -> dict:
	"""Trade the emailed code or token hash for a session; empty when the link is no good."""
	client = _ctx().interface.client
	try:
		if args.get("code"):
			verifier = flask.request.cookies.get(CODE_VERIFIER_COOKIE)
			if not verifier:
				logger.info("Auth callback without a code verifier cookie")
				return {}
			return client.exchange_code_for_session(args["code"], verifier)
		if args.get("token_hash") and args.get("type"):
			return client.verify_otp(args["type"], args["token_hash"])
	except SupabaseError as e:
		logger.info("Auth callback rejected: %s", e)
		return {}
	if args.get("error_description"):
		logger.info("Auth callback error: %s", args["error_description"])
	return {}


@main.route("/auth/callback")
def auth_callback():
	session = _callback_session(flask.request.args)
	if not session.get("access_token"):
		return build_error_page(400, "This link is invalid or has expired. Request a new one."), 400

	resp = flask.redirect(_safe_next(flask.request.args.get("next")))
	set_session_cookies(resp, _ctx(), session, int(session.get("expires_in") or SESSION_MAX_AGE))
	set_auth_cookie(resp, CODE_VERIFIER_COOKIE, "", 0)
	return resp


@main.route("/update-password")
@require_auth()
def update_password_page():
	return build_update_password_page()


@main.route("/home")
@require_auth()
def home_page():
	return build_home_page(_current_user(), get_portal_services(_ctx().env), _navigation())


@main.route("/home/admin/users")
@require_admin_access
def admin_users_page():
	service = create_user_approval_service(_ctx().interface.client)
	try:
		pending = [u.to_dict() for u in service.get_pending_users()]
		approved = [u.to_dict() for u in service.get_approved_users()]
	except RuntimeError as e:
		logger.error("Could not load users for the admin page: %s", e)
		pending, approved = [], []
	try:
		statistics = service.get_approval_statistics().to_dict()
	except RuntimeError as e:
		logger.error("Could not load approval statistics: %s", e)
		statistics = None
	return build_admin_users_page(pending, approved, statistics, _navigation())


@main.route("/home/admin/services")
@require_admin_access
def admin_services_page():
	settings = load_service_settings(_ctx())
	return build_admin_services_page(settings, summarize_status(settings), _navigation())


@main.app_errorhandler(404)
def not_found(e):
	return build_error_page(404, "The page you requested does not exist."), 404
