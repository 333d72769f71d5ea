from __future__ import annotations

from types import SimpleNamespace

from app.api_handlers import auth
from sql.supabase_client import SupabaseError


class _AuthClient:
	def __init__(self):
		self.calls = []
		self.fail = set()

	def _record(self, name, *args):
		self.calls.append((name, args))
		if name in self.fail:
			raise SupabaseError(f"{name} failed", status_code=400)

	def sign_in_with_password(self, email, password):
		self._record("sign_in", email, password)
		return {"access_token": "tok-1", "refresh_token": "ref-1", "expires_in": 3600}

	def sign_up(self, email, password, redirect_to=None, code_challenge=None):
		self._record("sign_up", email, password, redirect_to)
		self.challenge = code_challenge
		return {"id": "u1"}

	def sign_out(self, token):
		self._record("sign_out", token)

	def recover(self, email, redirect_to=None, code_challenge=None):
		self._record("recover", email, redirect_to)
		self.challenge = code_challenge

	def update_user(self, token, attributes):
		self._record("update_user", token, attributes)
		return {"id": "u1"}


def _ctx(client):
	interface = SimpleNamespace(
		client=client,
		forgotten=[],
		get_user_by_access_token=lambda token: {"id": "u1"} if token == "tok-1" else None,
	)
	interface.forget_access_token = interface.forgotten.append
	return SimpleNamespace(
		auth_token_name="sb-access-token",
		interface=interface,
		fcr=SimpleNamespace(find=lambda _: None),
		env={"SITE_URL": "https://portal.example.com"},
	)


def test_sign_in_sets_cookie(app_factory):
	client = _AuthClient()
	app = app_factory(auth.register, _ctx(client))

	resp = app.test_client().post("/api/auth/sign-in", json={"email": " Pat@Example.com ", "password": "hunter22"})
	assert resp.status_code == 200
	cookie = resp.headers.get("Set-Cookie", "")
	assert "sb-access-token=tok-1" in cookie
	assert "HttpOnly" in cookie
	assert "Secure" in cookie
	assert "SameSite=Lax" in cookie
	assert client.calls[0] == ("sign_in", ("pat@example.com", "hunter22"))
	assert "sb-refresh-token" not in " ".join(resp.headers.getlist("Set-Cookie"))


def test_sign_in_remember_me_keeps_refresh_token(app_factory):
	app = app_factory(auth.register, _ctx(_AuthClient()))

	resp = app.test_client().post("/api/auth/sign-in", json={
		"email": "pat@example.com",
		"password": "hunter22",
		"remember_me": True,
	})
	cookies = resp.headers.getlist("Set-Cookie")
	assert cookies[0].startswith("sb-access-token=tok-1")
	assert "Max-Age=2592000" in cookies[0]
	refresh = [c for c in cookies if c.startswith("sb-refresh-token=")]
	assert refresh and refresh[0].startswith("sb-refresh-token=ref-1")
	assert "HttpOnly" in refresh[0]


def test_sign_in_bad_credentials(app_factory):
	client = _AuthClient()
	client.fail.add("sign_in")
	app = app_factory(auth.register, _ctx(client))

	resp = app.test_client().post("/api/auth/sign-in", json={"email": "pat@example.com", "password": "wrong"})
	assert resp.status_code == 401
	assert resp.get_json()["message"] == "Invalid email or password."


def test_sign_in_rejects_non_object_body(app_factory):
	client = _AuthClient()
	app = app_factory(auth.register, _ctx(client))

	resp = app.test_client().post("/api/auth/sign-in", json=["pat@example.com", "hunter22"])
	assert resp.status_code == 400
	resp = app.test_client().post("/api/auth/sign-in", json={"email": 42, "password": ["x"]})
	assert resp.status_code == 400
	assert client.calls == []


def test_sign_in_missing_fields(app_factory):
	app = app_factory(auth.register, _ctx(_AuthClient()))
	resp = app.test_client().post("/api/auth/sign-in", json={"email": "pat@example.com"})
	assert resp.status_code == 400


def test_sign_up_validates_password(app_factory):
	client = _AuthClient()
	app = app_factory(auth.register, _ctx(client))

	resp = app.test_client().post("/api/auth/sign-up", json={"email": "pat@example.com", "password": "short"})
	assert resp.status_code == 400
	assert client.calls == []


def test_sign_up_uses_site_url_for_redirect(app_factory):
	client = _AuthClient()
	app = app_factory(auth.register, _ctx(client))

	resp = app.test_client().post("/api/auth/sign-up", json={
		"email": "pat@example.com",
		"password": "long-enough",
		"repeat_password": "long-enough",
	})
	assert resp.status_code == 200
	assert client.calls[0][1][2] == "https://portal.example.com/auth/callback?next=/home"
	assert client.challenge
	assert "sb-code-verifier=" in resp.headers.get("Set-Cookie", "")


def test_sign_out_clears_cookie_and_cache(app_factory):
	client = _AuthClient()
	ctx = _ctx(client)
	app = app_factory(auth.register, ctx)
	test_client = app.test_client()
	test_client.set_cookie("sb-access-token", "tok-1")

	resp = test_client.post("/api/auth/sign-out")
	assert resp.status_code == 200
	assert ctx.interface.forgotten == ["tok-1"]
	assert ("sign_out", ("tok-1",)) in client.calls
	assert "sb-access-token=;" in resp.headers.get("Set-Cookie", "")
	assert any(c.startswith("sb-refresh-token=;") for c in resp.headers.getlist("Set-Cookie"))


def test_password_reset_same_answer_for_unknown_email(app_factory):
	client = _AuthClient()
	app = app_factory(auth.register, _ctx(client))
	test_client = app.test_client()

	ok = test_client.post("/api/auth/password-reset", json={"email": "pat@example.com"})
	client.fail.add("recover")
	missing = test_client.post("/api/auth/password-reset", json={"email": "ghost@example.com"})
	assert ok.status_code == missing.status_code == 200
	assert ok.get_json() == missing.get_json()
	assert ok.get_json()["message"] == auth.PASSWORD_RESET_MESSAGE
	assert client.calls[0] == ("recover", ("pat@example.com", "https://portal.example.com/auth/callback?next=/update-password"))
	assert "sb-code-verifier=" in ok.headers.get("Set-Cookie", "")
	assert "sb-code-verifier=" in missing.headers.get("Set-Cookie", "")


def test_update_password_requires_session(app_factory):
	app = app_factory(auth.register, _ctx(_AuthClient()))
	resp = app.test_client().post("/api/auth/update-password", json={"password": "x", "confirm_password": "x"})
	assert resp.status_code == 401


def test_update_password_mismatch(app_factory):
	app = app_factory(auth.register, _ctx(_AuthClient()))
	test_client = app.test_client()
	test_client.set_cookie("sb-access-token", "tok-1")

	resp = test_client.post("/api/auth/update-password", json={"password": "new-password", "confirm_password": "other"})
	assert resp.status_code == 400
	assert resp.get_json()["message"] == "Passwords do not match."


def test_update_password(app_factory):
	client = _AuthClient()
	app = app_factory(auth.register, _ctx(client))
	test_client = app.test_client()
	test_client.set_cookie("sb-access-token", "tok-1")

	resp = test_client.post("/api/auth/update-password", json={
		"password": "new-password",
		"confirm_password": "new-password",
	})
	assert resp.status_code == 200
	assert client.calls[-1] == ("update_user", ("tok-1", {"password": "new-password"}))
