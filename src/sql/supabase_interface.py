import hashlib
import logging
from datetime import datetime, timezone

from sql.supabase_client import SupabaseClient, SupabaseError
from util.auth_cache import MISSING, TTLCache, session_cache
from util.fcr.file_config_reader import FileConfigReader

logger = logging.getLogger(__name__)

ACCOUNT_COLUMNS = "id, email, name, account_type, approval_status, approved_at, picture_url"
SESSION_CACHE_TTL = 60
INVALID_SESSION_CACHE_TTL = 30


class SupabaseInterface:
	def __init__(
		self,
		client: SupabaseClient | None = None,
		fcr: FileConfigReader | None = None,
		cache: TTLCache | None = None,
	):
		self._client = client or SupabaseClient.from_config(fcr or FileConfigReader())
		self._cache = cache if cache is not None else session_cache

	@property
	def client(self) -> SupabaseClient:
		return self._client

	# ---------- Accounts ----------
	def get_account(self, user_id: str) -> dict | None:
		if not user_id:
			return None
		rows = self._client.select(
			"accounts",
			columns=ACCOUNT_COLUMNS,
			equalities={"id": user_id},
			limit=1,
		)
		return rows[0] if rows else None

	def get_account_contact(self, user_id: str) -> dict | None:
		"""Name and email used for notification emails."""
		rows = self._client.select(
			"accounts",
			columns="name, email",
			equalities={"id": user_id},
			limit=1,
		)
		return rows[0] if rows else None

	def get_account_type(self, user_id: str) -> str | None:
		try:
			account = self.get_account(user_id)
		except SupabaseError as e:
			logger.warning("Could not load account type for %s: %s", user_id, e)
			return None
		return (account or {}).get("account_type")

	def is_admin(self, user_id: str | None) -> bool:
		if not user_id:
			return False
		return self.get_account_type(user_id) == "admin"

	def is_moderator(self, user_id: str | None) -> bool:
		if not user_id:
			return False
		return self.get_account_type(user_id) in ("admin", "moderator")

	# ---------- Sessions ----------
	@staticmethod
	def _token_key(access_token: str) -> str:
		return "session:" + hashlib.sha256(access_token.encode("utf-8")).hexdigest()

	def get_user_by_access_token(self, access_token: str) -> dict | None:
		"""
		Resolve an access token to the auth user merged with its account row.
		Lookups are cached briefly; rejected tokens are cached as misses. Raises
		SupabaseError when the backend could not answer.
		"""
		if not access_token:
			return None
		key = self._token_key(access_token)
		cached = self._cache.get(key)
		if cached is MISSING:
			return None
		if cached is not None:
			return cached

		# get_user answers None for rejected tokens; transport and 5xx errors propagate uncached.
		auth_user = self._client.get_user(access_token)
		if not auth_user or not auth_user.get("id"):
			self._cache.set(key, MISSING, ttl_seconds=INVALID_SESSION_CACHE_TTL)
			return None

		user = {
			"id": auth_user["id"],
			"email": auth_user.get("email"),
			"email_confirmed_at": auth_user.get("email_confirmed_at"),
			"last_sign_in_at": auth_user.get("last_sign_in_at"),
		}
		try:
			account = self.get_account(auth_user["id"])
		except SupabaseError as e:
			logger.warning("Account lookup failed for %s: %s", auth_user["id"], e)
			account = None
		if account:
			user["account"] = account
		self._cache.set(key, user, ttl_seconds=SESSION_CACHE_TTL)
		return user

	def forget_access_token(self, access_token: str) -> None:
		if access_token:
			self._cache.delete(self._token_key(access_token))

	# ---------- Services ----------
	def list_services(self) -> list[dict]:
		return self._client.select("services", order="name.asc")

	def get_service(self, service_key: str) -> dict | None:
		rows = self._client.select("services", equalities={"service_key": service_key}, limit=1)
		return rows[0] if rows else None

	def insert_service(self, row: dict) -> dict | None:
		rows = self._client.insert("services", row)
		return rows[0] if rows else None

	def update_service(self, service_key: str, updates: dict) -> dict | None:
		payload = dict(updates)
		payload.setdefault("updated_at", datetime.now(timezone.utc).isoformat())
		rows = self._client.update("services", payload, equalities={"service_key": service_key})
		return rows[0] if rows else None
