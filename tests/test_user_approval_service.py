from __future__ import annotations

import pytest

from sql.supabase_client import SupabaseError
from util import user_approval
from util.user_approval import (
	ApprovalActionParams,
	ApprovalStatus,
	ApprovalValidationError,
	UserApprovalService,
)

USER_ID = "22222222-2222-4222-8222-222222222222"
ADMIN_ID = "11111111-1111-4111-8111-111111111111"


class _FakeRpcClient:
	def __init__(self, responses=None, errors=None):
		self.responses = responses or {}
		self.errors = errors or {}
		self.calls = []

	def rpc(self, function, params=None):
		self.calls.append((function, params))
		if function in self.errors:
			raise self.errors[function]
		return self.responses.get(function)


def test_get_pending_users_maps_rows():
	client = _FakeRpcClient(responses={
		"get_pending_users": [{
			"id": USER_ID,
			"name": "Pat",
			"email": "pat@example.com",
			"requested_at": "2024-05-01T10:00:00Z",
			"approval_status": "pending",
			"unexpected_column": "ignored",
		}],
	})
	users = UserApprovalService(client).get_pending_users()
	assert len(users) == 1
	assert users[0].email == "pat@example.com"
	assert users[0].to_dict()["approval_status"] == "pending"
	assert client.calls == [("get_pending_users", None)]


def test_get_pending_users_failure_raises():
	client = _FakeRpcClient(errors={"get_pending_users": SupabaseError("boom", status_code=500)})
	with pytest.raises(RuntimeError, match="Failed to fetch pending users"):
		UserApprovalService(client).get_pending_users()


def test_get_approved_users_empty_payload():
	client = _FakeRpcClient(responses={"get_approved_users": None})
	assert UserApprovalService(client).get_approved_users() == []


def test_approve_user_calls_stored_procedure():
	client = _FakeRpcClient()
	result = UserApprovalService(client).approve_user(ApprovalActionParams(user_id=USER_ID), ADMIN_ID)
	assert result.success is True
	assert client.calls == [("approve_account", {"account_id": USER_ID, "admin_user_id": ADMIN_ID})]


def test_approve_user_failure_is_returned_not_raised():
	client = _FakeRpcClient(errors={"approve_account": SupabaseError("Account is not pending")})
	result = UserApprovalService(client).approve_user(ApprovalActionParams(user_id=USER_ID), ADMIN_ID)
	assert result.success is False
	assert result.error == "Account is not pending"
	assert result.to_dict() == {"success": False, "error": "Account is not pending"}


def test_reject_user_passes_reason():
	client = _FakeRpcClient()
	params = ApprovalActionParams(user_id=USER_ID, reason="Unknown person")
	result = UserApprovalService(client).reject_user(params, ADMIN_ID)
	assert result.success is True
	assert client.calls == [(
		"reject_account",
		{"account_id": USER_ID, "admin_user_id": ADMIN_ID, "reason": "Unknown person"},
	)]


def test_reject_user_empty_reason_sent_as_null():
	client = _FakeRpcClient()
	UserApprovalService(client).reject_user(ApprovalActionParams(user_id=USER_ID, reason=""), ADMIN_ID)
	assert client.calls[0][1]["reason"] is None


def test_approval_status_parsing():
	client = _FakeRpcClient(responses={
		"get_user_approval_status": [{"approval_status": "rejected", "rejection_reason": "spam"}],
	})
	service = UserApprovalService(client)
	status = service.get_user_approval_status(USER_ID)
	assert status.approval_status is ApprovalStatus.REJECTED
	assert status.to_dict()["rejectionReason"] == "spam"
	assert service.is_user_approved(USER_ID) is False


def test_approval_status_unknown_value_is_none():
	client = _FakeRpcClient(responses={"get_user_approval_status": {"approval_status": "weird"}})
	assert UserApprovalService(client).get_user_approval_status(USER_ID) is None


def test_approval_statistics():
	client = _FakeRpcClient(responses={
		"get_approval_statistics": [{"pending": 2, "approved": 5, "rejected": 1, "total": 8}],
	})
	stats = UserApprovalService(client).get_approval_statistics()
	assert stats.to_dict() == {"pending": 2, "approved": 5, "rejected": 1, "total": 8}


def test_approval_statistics_failure_raises():
	client = _FakeRpcClient(errors={"get_approval_statistics": SupabaseError("nope")})
	with pytest.raises(RuntimeError):
		UserApprovalService(client).get_approval_statistics()


def test_parse_action_params_requires_uuid():
	with pytest.raises(ApprovalValidationError):
		user_approval.parse_approval_action_params({"userId": "not-a-uuid"})
	params = user_approval.parse_approval_action_params({"userId": USER_ID.upper()})
	assert params.user_id == USER_ID


def test_parse_reject_form_requires_reason():
	with pytest.raises(ApprovalValidationError, match="Reason is required"):
		user_approval.parse_reject_user_form({"userId": USER_ID, "reason": "   "})
	params = user_approval.parse_reject_user_form({"userId": USER_ID, "reason": " No invite "})
	assert params.reason == "No invite"
