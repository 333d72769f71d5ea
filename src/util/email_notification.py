from __future__ import annotations

import html
import logging
import os

from util.integrations.email.email_interface import render_template, send_email
from util.services.catalog import PORTAL_SERVICES

logger = logging.getLogger(__name__)

DEFAULT_SITE_URL = "http://localhost:3000"
DEFAULT_REJECTION_REASON = "No specific reason provided"

# Shown in the welcome email, in this order.
_SERVICE_LABELS = {
	"jellyfin": "Jellyfin (Media Server)",
	"nextcloud": "Nextcloud (Cloud Storage)",
	"radarr": "Radarr (Movie Management)",
	"sonarr": "Sonarr (TV Series Management)",
	"manga-reader": "Manga Reader",
}
_WELCOME_ORDER = ("jellyfin", "nextcloud", "radarr", "sonarr", "manga-reader")


class EmailNotificationError(RuntimeError):
	pass


def _app_name() -> str:
	return (os.environ.get("APP_NAME") or "Marnix 13").strip()


def _service_labels() -> list[str]:
	known = {s.key for s in PORTAL_SERVICES}
	return [_SERVICE_LABELS[key] for key in _WELCOME_ORDER if key in known]


class EmailNotificationService:
	def __init__(self, site_url: str = DEFAULT_SITE_URL, *, sender=None):
		self.site_url = site_url or DEFAULT_SITE_URL
		self._send = sender.send_email if sender is not None else send_email

	def _deliver(
		self,
		*,
		to: str,
		subject: str,
		template: str,
		variables: dict[str, str],
		html_fragments: dict[str, str] | None = None,
	) -> None:
		if not to or "@" not in to:
			raise EmailNotificationError("Recipient email is missing or invalid.")
		logger.info("[EMAIL] Sending %s email to %s", template, to)
		html_context = {k: html.escape(v) for k, v in variables.items()}
		html_context.update(html_fragments or {})
		body_html = render_template(f"{template}.html", html_context)
		body_text = render_template(f"{template}.txt", variables)
		result = self._send(
			to_addrs=[to],
			subject=subject,
			body_text=body_text,
			body_html=body_html,
		)
		if not getattr(result, "ok", False):
			raise EmailNotificationError(getattr(result, "error", None) or "Email delivery failed.")

	def send_approval_notification(self, user: dict) -> None:
		labels = _service_labels()
		app_name = _app_name()
		self._deliver(
			to=user.get("email") or "",
			subject=f"Welcome to {app_name}! Your account has been approved",
			template="approval",
			variables={
				"app_name": app_name,
				"name": user.get("name") or "User",
				"email": user.get("email") or "",
				"site_url": self.site_url,
				"services_text": "\n".join(f"- {label}" for label in labels),
			},
			html_fragments={
				"services_html": "\n".join(f"\t\t<li>{html.escape(label)}</li>" for label in labels),
			},
		)
		logger.info("[EMAIL] Approval notification sent to %s (%s)", user.get("email"), user.get("name"))

	def send_rejection_notification(self, user: dict, reason: str | None = None) -> None:
		self._deliver(
			to=user.get("email") or "",
			subject=f"Account Request Update - {_app_name()}",
			template="rejection",
			variables={
				"name": user.get("name") or "User",
				"email": user.get("email") or "",
				"reason": reason or DEFAULT_REJECTION_REASON,
			},
		)
		logger.info("[EMAIL] Rejection notification sent to %s (%s)", user.get("email"), user.get("name"))
		if reason:
			logger.info("[EMAIL] Rejection reason: %s", reason)


def create_email_notification_service(site_url: str = DEFAULT_SITE_URL, *, sender=None) -> EmailNotificationService:
	return EmailNotificationService(site_url, sender=sender)
