from __future__ import annotations

import logging
import os
import re
import uuid
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 200


@dataclass
class EmailSendResult:
	ok: bool
	error: str | None = None
	message_id: str | None = None


class LoggingEmailSender:
	"""
	Development sender: writes every outgoing email to the log instead of
	delivering it.
	"""

	def __init__(self, *, sender_email: str | None = None, log_body: bool = True) -> None:
		self._sender_email = (sender_email or os.environ.get("EMAIL_SENDER") or "noreply@localhost").strip()
		self._log_body = log_body

	def send_email(
		self,
		*,
		to_addrs: Iterable[str],
		subject: str,
		body_text: str | None = None,
		body_html: str | None = None,
		reply_to: str | None = None,
	) -> EmailSendResult:
		recipients = [addr for addr in (to_addrs or []) if addr]
		if not recipients:
			return EmailSendResult(ok=False, error="Missing recipient.")

		content = body_text or body_html or ""
		preview = content.strip()[:PREVIEW_CHARS]
		message_id = uuid.uuid4().hex
		logger.info("[EMAIL] Sending email to %s", ", ".join(recipients))
		logger.info("[EMAIL] From: %s | Subject: %s", self._sender_email, subject)
		if reply_to:
			logger.info("[EMAIL] Reply-To: %s", reply_to)
		logger.info("[EMAIL] Content preview: %s...", preview)
		if self._log_body:
			logger.debug("[EMAIL] Full email content:\n%s", content)
		logger.info("[EMAIL] Email logged for %s (id %s)", ", ".join(recipients), message_id)
		return EmailSendResult(ok=True, message_id=message_id)


_DEFAULT_SENDER: LoggingEmailSender | None = None
_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def get_sender() -> LoggingEmailSender:
	global _DEFAULT_SENDER
	if _DEFAULT_SENDER is None:
		_DEFAULT_SENDER = LoggingEmailSender()
	return _DEFAULT_SENDER


def set_sender(sender) -> None:
	global _DEFAULT_SENDER
	_DEFAULT_SENDER = sender


def render_template(name: str, context: dict[str, str]) -> str:
	path = os.path.join(_TEMPLATE_DIR, name)
	with open(path, "r", encoding="utf-8") as handle:
		content = handle.read()
	# One pass, so substituted values are never scanned for placeholders again.
	return _PLACEHOLDER.sub(lambda m: str(context.get(m.group(1), m.group(0))), content)


def send_email(
	*,
	to_addrs: Iterable[str],
	subject: str,
	body_text: str | None = None,
	body_html: str | None = None,
	reply_to: str | None = None,
) -> EmailSendResult:
	return get_sender().send_email(
		to_addrs=to_addrs,
		subject=subject,
		body_text=body_text,
		body_html=body_html,
		reply_to=reply_to,
	)
