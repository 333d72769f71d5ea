"""
User approval workflow.

New sign-ups start as ``pending``; an admin moves them to ``approved`` or
``rejected``. The transitions themselves live in stored procedures on the
hosted database (approve_account, reject_account, ...). This module only
wraps those calls and shapes their payloads.
"""
from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import asdict, dataclass, fields
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "UserApprovalService"


class ApprovalStatus(str, enum.Enum):
	PENDING = "pending"
	APPROVED = "approved"
	REJECTED = "rejected"


class ApprovalValidationError(ValueError):
	pass


@dataclass
class ApprovalActionParams:
	user_id: str
	reason: str | None = None


@dataclass
class ApprovalActionResult:
	success: bool
	error: str | None = None

	def to_dict(self) -> dict:
		out: dict[str, Any] = {"success": self.success}
		if self.error:
			out["error"] = self.error
		return out


def _from_row(cls, row: dict):
	names = {f.name for f in fields(cls)}
	return cls(**{k: v for k, v in row.items() if k in names})


@dataclass
class PendingUserView:
	id: str
	name: str
	email: str
	requested_at: str
	approval_status: str = ApprovalStatus.PENDING.value
	picture_url: str | None = None
	email_confirmed_at: str | None = None
	last_sign_in_at: str | None = None

	def to_dict(self) -> dict:
		return asdict(self)


@dataclass
class ApprovedUserView:
	id: str
	name: str
	email: str
	requested_at: str
	approved_at: str
	approved_by: str
	approval_status: str = ApprovalStatus.APPROVED.value
	picture_url: str | None = None
	email_confirmed_at: str | None = None
	last_sign_in_at: str | None = None
	approved_by_email: str | None = None

	def to_dict(self) -> dict:
		return asdict(self)


@dataclass
class ApprovalStatistics:
	pending: int = 0
	approved: int = 0
	rejected: int = 0
	total: int = 0

	def to_dict(self) -> dict:
		return asdict(self)


@dataclass
class UserApprovalStatus:
	approval_status: ApprovalStatus
	approved_at: str | None = None
	rejected_at: str | None = None
	rejection_reason: str | None = None

	def to_dict(self) -> dict:
		return {
			"approvalStatus": self.approval_status.value,
			"approvedAt": self.approved_at,
			"rejectedAt": self.rejected_at,
			"rejectionReason": self.rejection_reason,
		}


def _require_uuid(value: Any) -> str:
	raw = (str(value) if value is not None else "").strip()
	try:
		return str(uuid.UUID(raw))
	except ValueError:
		raise ApprovalValidationError("Invalid user id.") from None


def parse_approval_action_params(data: dict) -> ApprovalActionParams:
	user_id = _require_uuid(data.get("userId"))
	reason = data.get("reason")
	if reason is not None and not isinstance(reason, str):
		raise ApprovalValidationError("Reason must be a string.")
	return ApprovalActionParams(user_id=user_id, reason=reason)


def parse_reject_user_form(data: dict) -> ApprovalActionParams:
	params = parse_approval_action_params(data)
	reason = (params.reason or "").strip()
	if not reason:
		raise ApprovalValidationError("Reason is required for rejection")
	params.reason = reason
	return params


def _parse_status_payload(data: Any) -> UserApprovalStatus | None:
	if isinstance(data, list):
		data = data[0] if data else None
	if not isinstance(data, dict):
		return None
	raw = data.get("approvalStatus") or data.get("approval_status")
	try:
		status = ApprovalStatus(raw)
	except ValueError:
		logger.warning("[%s] Unknown approval status %r", NAMESPACE, raw)
		return None
	return UserApprovalStatus(
		approval_status=status,
		approved_at=data.get("approvedAt") or data.get("approved_at"),
		rejected_at=data.get("rejectedAt") or data.get("rejected_at"),
		rejection_reason=data.get("rejectionReason") or data.get("rejection_reason"),
	)


class UserApprovalService:
	def __init__(self, admin_client):
		self._client = admin_client

	def get_pending_users(self) -> list[PendingUserView]:
		"""Accounts still waiting for an admin decision."""
		try:
			data = self._client.rpc("get_pending_users")
		except Exception as e:
			logger.error("[%s] Failed to fetch pending users: %s", NAMESPACE, e)
			raise RuntimeError("Failed to fetch pending users") from e
		return [_from_row(PendingUserView, row) for row in (data or [])]

	def get_approved_users(self) -> list[ApprovedUserView]:
		try:
			data = self._client.rpc("get_approved_users")
		except Exception as e:
			logger.error("[%s] Failed to fetch approved users: %s", NAMESPACE, e)
			raise RuntimeError("Failed to fetch approved users") from e
		return [_from_row(ApprovedUserView, row) for row in (data or [])]

	def approve_user(self, params: ApprovalActionParams, admin_user_id: str) -> ApprovalActionResult:
		logger.info("[%s] Approving user account %s (admin %s)", NAMESPACE, params.user_id, admin_user_id)
		try:
			self._client.rpc("approve_account", {
				"account_id": params.user_id,
				"admin_user_id": admin_user_id,
			})
		except Exception as e:
			logger.error("[%s] Failed to approve user %s: %s", NAMESPACE, params.user_id, e)
			return ApprovalActionResult(success=False, error=str(e) or "Unknown error")
		logger.info("[%s] User account %s approved successfully", NAMESPACE, params.user_id)
		return ApprovalActionResult(success=True)

	def reject_user(self, params: ApprovalActionParams, admin_user_id: str) -> ApprovalActionResult:
		logger.info(
			"[%s] Rejecting user account %s (admin %s, reason %r)",
			NAMESPACE, params.user_id, admin_user_id, params.reason,
		)
		try:
			self._client.rpc("reject_account", {
				"account_id": params.user_id,
				"admin_user_id": admin_user_id,
				"reason": params.reason or None,
			})
		except Exception as e:
			logger.error("[%s] Failed to reject user %s: %s", NAMESPACE, params.user_id, e)
			return ApprovalActionResult(success=False, error=str(e) or "Unknown error")
		logger.info("[%s] User account %s rejected successfully", NAMESPACE, params.user_id)
		return ApprovalActionResult(success=True)

	def get_user_approval_status(self, user_id: str) -> UserApprovalStatus | None:
		try:
			data = self._client.rpc("get_user_approval_status", {"user_id": user_id})
		except Exception as e:
			logger.error("[%s] Failed to fetch approval status for %s: %s", NAMESPACE, user_id, e)
			return None
		return _parse_status_payload(data)

	def is_user_approved(self, user_id: str) -> bool:
		status = self.get_user_approval_status(user_id)
		return status is not None and status.approval_status is ApprovalStatus.APPROVED

	def get_approval_statistics(self) -> ApprovalStatistics:
		try:
			data = self._client.rpc("get_approval_statistics")
		except Exception as e:
			logger.error("[%s] Failed to fetch approval statistics: %s", NAMESPACE, e)
			raise RuntimeError("Failed to fetch approval statistics") from e
		if isinstance(data, list):
			data = data[0] if data else None
		if not data:
			return ApprovalStatistics()
		return ApprovalStatistics(
			pending=int(data.get("pending") or 0),
			approved=int(data.get("approved") or 0),
			rejected=int(data.get("rejected") or 0),
			total=int(data.get("total") or 0),
		)


def create_user_approval_service(admin_client) -> UserApprovalService:
	return UserApprovalService(admin_client)
