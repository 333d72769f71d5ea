from __future__ import annotations

from types import SimpleNamespace

import flask

from app import api_common
from sql.supabase_client import SupabaseError


class _Interface:
	def __init__(self, account=None, admin=False, account_error=None):
		self.account = account
		self.admin = admin
		self.account_error = account_error
		self.admin_checks = 0

	def get_user_by_access_token(self, token):
		if token == "flaky":
			raise SupabaseError("Service Unavailable", status_code=503)
		return {"id": "u1", "email": "pat@example.com"} if token == "good" else None

	def is_admin(self, user_id):
		self.admin_checks += 1
		return self.admin

	def get_account(self, user_id):
		if self.account_error:
			raise self.account_error
		return self.account

	def get_account_contact(self, user_id):
		if self.account_error:
			raise self.account_error
		return self.account


def _ctx(interface):
	return SimpleNamespace(
		auth_token_name="sb-access-token",
		interface=interface,
		fcr=SimpleNamespace(find=lambda _: None),
		env={},
	)


def _request(cookie=None, headers=None):
	app = flask.Flask(__name__)
	environ = {}
	if cookie:
		environ["HTTP_COOKIE"] = f"sb-access-token={cookie}"
	return app.test_request_context("/", headers=headers or {}, environ_base=environ)


def test_require_admin_without_session():
	with _request():
		user, err = api_common.require_admin(_ctx(_Interface()))
		assert user is None
		assert err[1] == 401
		assert err[0].get_json()["message"] == "Authentication required."


def test_require_admin_invalid_session():
	with _request(cookie="bad"):
		_, err = api_common.require_admin(_ctx(_Interface()))
		assert err[1] == 401
		assert err[0].get_json()["message"] == "Invalid session."


def test_require_admin_non_admin():
	with _request(cookie="good"):
		_, err = api_common.require_admin(_ctx(_Interface(admin=False)))
		assert err[1] == 403


def test_require_admin_rechecks_role_each_call():
	interface = _Interface(admin=True)
	with _request(cookie="good"):
		user, err = api_common.require_admin(_ctx(interface))
		api_common.require_admin(_ctx(interface))
	assert err is None
	assert user["id"] == "u1"
	assert interface.admin_checks == 2


def test_bearer_header_accepted():
	with _request(headers={"Authorization": "Bearer good"}):
		assert api_common.get_request_user(_ctx(_Interface()))["id"] == "u1"


def test_current_user_status_helpers():
	account = {"id": "u1", "account_type": "moderator", "approval_status": "approved"}
	ctx = _ctx(_Interface(account=account))
	with _request(cookie="good"):
		assert api_common.get_current_user_admin_status(ctx) is False
		assert api_common.get_current_user_moderator_status(ctx) is True
		assert api_common.get_current_user_approval_status(ctx) is True


def test_current_user_helpers_swallow_errors():
	ctx = _ctx(_Interface(account_error=SupabaseError("down")))
	with _request(cookie="good"):
		assert api_common.get_current_user_account(ctx) is None
		assert api_common.get_current_user_admin_status(ctx) is False
	with _request():
		assert api_common.get_current_user_approval_status(ctx) is False


def test_fetch_user_account_data():
	ok_ctx = _ctx(_Interface(account={"name": "Pat", "email": "pat@example.com"}))
	assert api_common.fetch_user_account_data(ok_ctx, "u1") == ({"name": "Pat", "email": "pat@example.com"}, None)

	missing_ctx = _ctx(_Interface(account=None))
	assert api_common.fetch_user_account_data(missing_ctx, "u1") == (None, "Account not found.")

	err_ctx = _ctx(_Interface(account_error=SupabaseError("down")))
	assert api_common.fetch_user_account_data(err_ctx, "u1") == (None, "down")


def test_require_user_reports_lookup_outage():
	with _request(cookie="flaky"):
		user, err = api_common.require_user(_ctx(_Interface()))
		assert user is None
		assert err[1] == 503
		assert err[0].get_json()["message"] == "Session service unavailable."


def test_require_user_rejects_unknown_token():
	with _request(cookie="nope"):
		_user, err = api_common.require_user(_ctx(_Interface()))
		assert err[1] == 401
		assert err[0].get_json()["message"] == "Invalid session."


def test_get_request_user_is_anonymous_during_outage():
	with _request(cookie="flaky"):
		assert api_common.get_request_user(_ctx(_Interface())) is None


def test_request_data_reads_json_objects_only():
	app = flask.Flask(__name__)
	with app.test_request_context("/", method="POST", json={"email": " a@example.com "}):
		data = api_common.request_data()
		assert api_common.text_field(data, "email") == "a@example.com"
		assert api_common.text_field(data, "email", strip=False) == " a@example.com "
	with app.test_request_context("/", method="POST", json=["a@example.com"]):
		assert api_common.request_data() == {}
	with app.test_request_context("/", method="POST", data={"user_id": "u1"}):
		assert api_common.request_data() == {"user_id": "u1"}


def test_text_field_ignores_non_strings():
	assert api_common.text_field({"password": 12345678}, "password") == ""
	assert api_common.text_field({}, "password") == ""
