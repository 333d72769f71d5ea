import base64
import hashlib
import logging
import os
import secrets
from typing import Any

import requests

from util.fcr.file_config_reader import FileConfigReader

logger = logging.getLogger(__name__)


class SupabaseError(RuntimeError):
	def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
		super().__init__(message)
		self.message = message
		self.status_code = status_code
		self.code = code


def _error_message(resp: requests.Response) -> tuple[str, str | None]:
	try:
		payload = resp.json()
	except ValueError:
		return (resp.text or f"HTTP {resp.status_code}").strip(), None
	if not isinstance(payload, dict):
		return str(payload), None
	for key in ("message", "msg", "error_description", "error"):
		val = payload.get(key)
		if val:
			code = payload.get("code") or payload.get("error_code")
			return str(val), str(code) if code is not None else None
	return resp.text, None


def generate_pkce_pair() -> tuple[str, str]:
	"""Return (code_verifier, code_challenge) for the s256 PKCE flow."""
	verifier = secrets.token_urlsafe(48)
	digest = hashlib.sha256(verifier.encode("ascii")).digest()
	challenge = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
	return verifier, challenge


def _pkce_body(code_challenge: str | None) -> dict:
	if not code_challenge:
		return {}
	return {"code_challenge": code_challenge, "code_challenge_method": "s256"}


class SupabaseClient:
	"""
	Minimal client for the hosted backend: PostgREST for tables and stored
	procedures, GoTrue for sessions. Table and RPC calls use the service-role
	key; auth calls use the anon key plus the user's access token.
	"""

	def __init__(
		self,
		url: str | None,
		anon_key: str | None,
		service_role_key: str | None = None,
		*,
		timeout_s: float = 12.0,
		session: requests.Session | None = None,
	) -> None:
		self.url = (url or "").strip().rstrip("/")
		self.anon_key = (anon_key or "").strip()
		self.service_role_key = (service_role_key or "").strip()
		self.timeout_s = float(timeout_s)
		self._session = session or requests.Session()

	@classmethod
	def from_config(cls, fcr: FileConfigReader | None = None, env: dict | None = None) -> "SupabaseClient":
		env_vars = env if env is not None else os.environ
		conf: dict = {}
		if fcr is not None:
			try:
				found = fcr.find("supabase.conf")
				if isinstance(found, dict):
					conf = found
			except Exception as e:
				logger.warning("Could not read supabase.conf: %s", e)

		def _get(key: str) -> str:
			return (env_vars.get(key) or conf.get(key) or "").strip()

		return cls(
			url=_get("SUPABASE_URL"),
			anon_key=_get("SUPABASE_ANON_KEY"),
			service_role_key=_get("SUPABASE_SERVICE_ROLE_KEY"),
		)

	# ---------- Transport ----------
	def _headers(self, *, admin: bool, access_token: str | None = None, prefer: str | None = None) -> dict[str, str]:
		key = self.service_role_key if admin else self.anon_key
		if not self.url or not key:
			raise SupabaseError("Supabase is not configured (missing URL or API key).")
		headers = {
			"apikey": key,
			"Authorization": f"Bearer {access_token or key}",
			"Content-Type": "application/json",
		}
		if prefer:
			headers["Prefer"] = prefer
		return headers

	def _request(
		self,
		method: str,
		path: str,
		*,
		admin: bool = True,
		access_token: str | None = None,
		params: dict | None = None,
		json_body: Any = None,
		prefer: str | None = None,
	) -> Any:
		headers = self._headers(admin=admin, access_token=access_token, prefer=prefer)
		try:
			resp = self._session.request(
				method=method,
				url=f"{self.url}{path}",
				headers=headers,
				params=params or {},
				json=json_body,
				timeout=self.timeout_s,
			)
		except requests.RequestException as e:
			raise SupabaseError(f"Supabase request failed: {e}") from e

		if resp.status_code >= 400:
			message, code = _error_message(resp)
			logger.debug("Supabase %s %s failed (%s): %s", method, path, resp.status_code, message)
			raise SupabaseError(message, status_code=resp.status_code, code=code)
		if not resp.content:
			return None
		try:
			return resp.json()
		except ValueError:
			return resp.text

	# ---------- PostgREST ----------
	def rpc(self, function: str, params: dict | None = None) -> Any:
		return self._request("POST", f"/rest/v1/rpc/{function}", json_body=params or {})

	@staticmethod
	def _filters(equalities: dict | None) -> dict[str, str]:
		out: dict[str, str] = {}
		for col, val in (equalities or {}).items():
			if val is None:
				out[col] = "is.null"
			elif isinstance(val, bool):
				out[col] = f"eq.{str(val).lower()}"
			else:
				out[col] = f"eq.{val}"
		return out

	def select(
		self,
		table: str,
		*,
		columns: str = "*",
		equalities: dict | None = None,
		limit: int | None = None,
		order: str | None = None,
		single: bool = False,
	) -> Any:
		params = {"select": columns, **self._filters(equalities)}
		if order:
			params["order"] = order
		if single:
			params["limit"] = "1"
		elif limit is not None:
			params["limit"] = str(int(limit))
		rows = self._request("GET", f"/rest/v1/{table}", params=params) or []
		if single:
			if not rows:
				raise SupabaseError(f"No row found in {table}.", status_code=406, code="PGRST116")
			return rows[0]
		return rows

	def insert(self, table: str, row: dict | list[dict]) -> list[dict]:
		return self._request(
			"POST",
			f"/rest/v1/{table}",
			json_body=row,
			prefer="return=representation",
		) or []

	def update(self, table: str, updates: dict, *, equalities: dict) -> list[dict]:
		if not equalities:
			raise ValueError("Refusing to update without filters.")
		return self._request(
			"PATCH",
			f"/rest/v1/{table}",
			params=self._filters(equalities),
			json_body=updates,
			prefer="return=representation",
		) or []

	# ---------- GoTrue ----------
	def get_user(self, access_token: str) -> dict | None:
		if not access_token:
			return None
		try:
			return self._request("GET", "/auth/v1/user", admin=False, access_token=access_token)
		except SupabaseError as e:
			if e.status_code in (401, 403):
				return None
			raise

	def sign_in_with_password(self, email: str, password: str) -> dict:
		return self._request(
			"POST",
			"/auth/v1/token",
			admin=False,
			params={"grant_type": "password"},
			json_body={"email": email, "password": password},
		) or {}

	def sign_up(
		self,
		email: str,
		password: str,
		redirect_to: str | None = None,
		code_challenge: str | None = None,
	) -> dict:
		return self._request(
			"POST",
			"/auth/v1/signup",
			admin=False,
			params={"redirect_to": redirect_to} if redirect_to else None,
			json_body={"email": email, "password": password, **_pkce_body(code_challenge)},
		) or {}

	def sign_out(self, access_token: str) -> None:
		self._request("POST", "/auth/v1/logout", admin=False, access_token=access_token)

	def recover(self, email: str, redirect_to: str | None = None, code_challenge: str | None = None) -> None:
		self._request(
			"POST",
			"/auth/v1/recover",
			admin=False,
			params={"redirect_to": redirect_to} if redirect_to else None,
			json_body={"email": email, **_pkce_body(code_challenge)},
		)

	def update_user(self, access_token: str, attributes: dict) -> dict:
		return self._request(
			"PUT",
			"/auth/v1/user",
			admin=False,
			access_token=access_token,
			json_body=attributes,
		) or {}

	def exchange_code_for_session(self, auth_code: str, code_verifier: str) -> dict:
		return self._request(
			"POST",
			"/auth/v1/token",
			admin=False,
			params={"grant_type": "pkce"},
			json_body={"auth_code": auth_code, "code_verifier": code_verifier},
		) or {}

	def verify_otp(self, otp_type: str, token_hash: str) -> dict:
		return self._request(
			"POST",
			"/auth/v1/verify",
			admin=False,
			json_body={"type": otp_type, "token_hash": token_hash},
		) or {}

	def refresh_session(self, refresh_token: str) -> dict:
		return self._request(
			"POST",
			"/auth/v1/token",
			admin=False,
			params={"grant_type": "refresh_token"},
			json_body={"refresh_token": refresh_token},
		) or {}
