from __future__ import annotations

import logging

import flask

from app.api_context import ApiContext
from app.api_common import (
	fetch_user_account_data,
	get_site_url,
	json_error,
	request_data,
	require_admin,
	require_user,
)
from util.email_notification import create_email_notification_service
from util.user_approval import (
	ApprovalValidationError,
	create_user_approval_service,
	parse_approval_action_params,
	parse_reject_user_form,
)

logger = logging.getLogger(__name__)


def _notify(ctx: ApiContext, action: str, user_id: str, reason: str | None = None) -> None:
	"""Best-effort; a failed email never undoes the decision."""
	try:
		account, error = fetch_user_account_data(ctx, user_id)
		if error or not account:
			logger.error("[%s] Failed to get account data for notification: %s", action, error)
			return
		if not account.get("email"):
			logger.error("[%s] Cannot send notification: user email is missing", action)
			return
		recipient = {
			"id": user_id,
			"name": account.get("name") or "User",
			"email": account.get("email"),
		}
		emails = create_email_notification_service(get_site_url(ctx))
		if action == "approve":
			emails.send_approval_notification(recipient)
		else:
			emails.send_rejection_notification(recipient, reason)
		logger.info("[%s] Notification sent to %s", action, recipient["email"])
	except Exception:
		logger.exception("[%s] Failed to send notification for %s", action, user_id)


def register(api: flask.Blueprint, ctx: ApiContext) -> None:
	@api.route("/api/admin/users/pending")
	def api_admin_users_pending():
		_user, err = require_admin(ctx)
		if err:
			return err
		try:
			users = create_user_approval_service(ctx.interface.client).get_pending_users()
		except Exception:
			logger.exception("Failed to get pending users")
			return json_error("Failed to fetch pending users", 500)
		logger.info("Retrieved %d pending users", len(users))
		return flask.jsonify({"ok": True, "data": [u.to_dict() for u in users]})

	@api.route("/api/admin/users/approved")
	def api_admin_users_approved():
		_user, err = require_admin(ctx)
		if err:
			return err
		try:
			users = create_user_approval_service(ctx.interface.client).get_approved_users()
		except Exception:
			logger.exception("Failed to get approved users")
			return json_error("Failed to fetch approved users", 500)
		logger.info("Retrieved %d approved users", len(users))
		return flask.jsonify({"ok": True, "data": [u.to_dict() for u in users]})

	@api.route("/api/admin/users/statistics")
	def api_admin_users_statistics():
		_user, err = require_admin(ctx)
		if err:
			return err
		try:
			stats = create_user_approval_service(ctx.interface.client).get_approval_statistics()
		except Exception:
			logger.exception("Failed to get approval statistics")
			return json_error("Failed to fetch statistics", 500)
		return flask.jsonify({"ok": True, "data": stats.to_dict()})

	@api.route("/api/admin/users/approve", methods=["POST"])
	def api_admin_users_approve():
		admin, err = require_admin(ctx)
		if err:
			return err
		try:
			params = parse_approval_action_params(request_data())
		except ApprovalValidationError as e:
			logger.error("Invalid form data: %s", e)
			return json_error("Invalid form data", 400)

		result = create_user_approval_service(ctx.interface.client).approve_user(params, admin["id"])
		if not result.success:
			return json_error(result.error or "Failed to approve user", 400)

		_notify(ctx, "approve", params.user_id)
		return flask.jsonify({"ok": True, "message": "User approved."})

	@api.route("/api/admin/users/reject", methods=["POST"])
	def api_admin_users_reject():
		admin, err = require_admin(ctx)
		if err:
			return err
		try:
			params = parse_reject_user_form(request_data())
		except ApprovalValidationError as e:
			logger.error("Invalid form data: %s", e)
			return json_error("Invalid form data", 400)

		result = create_user_approval_service(ctx.interface.client).reject_user(params, admin["id"])
		if not result.success:
			return json_error(result.error or "Failed to reject user", 400)

		_notify(ctx, "reject", params.user_id, params.reason)
		return flask.jsonify({"ok": True, "message": "User rejected."})

	@api.route("/api/account/approval-status")
	def api_account_approval_status():
		user, err = require_user(ctx)
		if err:
			return err
		status = create_user_approval_service(ctx.interface.client).get_user_approval_status(user["id"])
		if status is None:
			return json_error("Approval status not found.", 404)
		return flask.jsonify({"ok": True, "data": status.to_dict()})
