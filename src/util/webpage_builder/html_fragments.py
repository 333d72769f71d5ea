from __future__ import annotations

import html


def paragraph(text: str) -> str:
	return f"<p>{html.escape(text)}</p>\n"


def heading(text: str, level: int) -> str:
	return f"<h{level}>{html.escape(text)}</h{level}>\n"


def error_header(code: int, description: str) -> str:
	return f"<h1>Error {code}</h1><p>{html.escape(description)}</p>\n"


def return_home() -> str:
	return "<p><a href='/'>Return to Home Page</a></p>\n"


def page_header(title: str, subtitle: str) -> str:
	return (
		"<header class=\"page-header\">"
		f"<h1>{html.escape(title)}</h1>"
		f"<p>{html.escape(subtitle)}</p>"
		"</header>\n"
	)


def stat_card(label: str, value: int | str) -> str:
	return (
		"<div class=\"stat-card\">"
		f"<div class=\"stat-card__value\">{html.escape(str(value))}</div>"
		f"<div class=\"stat-card__label\">{html.escape(label)}</div>"
		"</div>"
	)


def stat_grid(cards_html: str) -> str:
	return f"<section class=\"stat-grid\">{cards_html}</section>\n"


def service_card(service: dict) -> str:
	name = html.escape(service.get("name") or "")
	desc = html.escape(service.get("description") or "")
	if service.get("configured"):
		link = (
			f"<a class=\"service-card__open\" href=\"{html.escape(service['url'])}\" "
			"target=\"_blank\" rel=\"noopener noreferrer\">Open</a>"
		)
	else:
		link = "<span class=\"service-card__open is-disabled\">Not configured</span>"
	featured = " service-card--featured" if service.get("featured") else ""
	return (
		f"<article class=\"service-card{featured}\" data-service=\"{html.escape(service.get('key') or '')}\">"
		f"<div class=\"service-card__name\">{name}</div>"
		f"<div class=\"service-card__desc\">{desc}</div>"
		f"{link}"
		"</article>"
	)


def service_grid(cards_html: str) -> str:
	return f"<section class=\"service-grid\">{cards_html}</section>\n"


def status_badge(status: str) -> str:
	status_safe = html.escape(status or "unknown")
	return f"<span class=\"status-badge status-badge--{status_safe}\">{status_safe}</span>"


def service_settings_row(setting: dict) -> str:
	key = html.escape(setting.get("id") or "")
	api_key = html.escape(setting.get("api_key") or "Not set")
	return (
		f"<tr data-service-id=\"{key}\">"
		f"<td>{html.escape(setting.get('name') or '')}</td>"
		f"<td><code>{html.escape(setting.get('url') or '')}</code></td>"
		f"<td>{api_key}</td>"
		f"<td>{status_badge(setting.get('status') or 'unknown')}</td>"
		f"<td>{'Enabled' if setting.get('enabled') else 'Disabled'}</td>"
		f"<td>{'On' if setting.get('auto_provision') else 'Off'}</td>"
		"<td>"
		f"<button data-service-action=\"toggle\" data-service-id=\"{key}\">Toggle</button>"
		f"<button data-service-action=\"test\" data-service-id=\"{key}\">Test</button>"
		"</td>"
		"</tr>"
	)


def service_settings_table(rows_html: str) -> str:
	return (
		"<table class=\"service-settings\">"
		"<thead><tr><th>Service</th><th>URL</th><th>API key</th><th>Status</th>"
		"<th>Enabled</th><th>Auto-provision</th><th></th></tr></thead>"
		f"<tbody>{rows_html}</tbody>"
		"</table>\n"
	)


def approval_row(label: str, value: str) -> str:
	return (
		"<div class=\"approval-card__row\">"
		f"<span class=\"label\">{html.escape(label)}</span>"
		f"<span class=\"value\">{html.escape(value or '-')}</span>"
		"</div>"
	)


def approval_actions(user_id: str) -> str:
	user_safe = html.escape(user_id)
	return (
		"<div class=\"approval-card__actions\">"
		f"<button data-approval-action=\"approve\" data-submit-route=\"/api/admin/users/approve\" "
		f"data-submit-method=\"POST\" data-user-id=\"{user_safe}\">Approve</button>"
		f"<button class=\"danger\" data-approval-action=\"reject\" data-submit-route=\"/api/admin/users/reject\" "
		f"data-submit-method=\"POST\" data-user-id=\"{user_safe}\">Reject</button>"
		"</div>"
	)


def approval_card(name: str, email: str, status_label: str, rows_html: str, actions_html: str = "") -> str:
	return (
		"<article class=\"approval-card\" data-approval-card>"
		"<div class=\"approval-card__header\">"
		f"<div><div class=\"approval-card__title\">{html.escape(name)}</div>"
		f"<div class=\"approval-card__subtitle\">{html.escape(email)}</div></div>"
		f"<div class=\"approval-card__status\">{html.escape(status_label)}</div>"
		"</div>"
		f"<div class=\"approval-card__grid\">{rows_html}</div>"
		f"{actions_html}"
		"</article>"
	)


def approval_section(title: str, cards_html: str, empty_message: str) -> str:
	body = cards_html or f"<p class=\"empty\">{html.escape(empty_message)}</p>"
	return f"<section class=\"approval-section\"><h2>{html.escape(title)}</h2>{body}</section>\n"


def form_field(label: str, name: str, input_type: str = "text") -> str:
	if input_type == "checkbox":
		return f"\t<label><input type=\"checkbox\" name=\"{html.escape(name)}\"> {html.escape(label)}</label>\n"
	return f"\t<label>{html.escape(label)} <input type=\"{html.escape(input_type)}\" name=\"{html.escape(name)}\" required></label>\n"


def api_form(route: str, fields_html: str, submit_label: str) -> str:
	"""Form posted as JSON to an /api route; the response message is shown in role=alert."""
	return (
		f"<form class=\"form\" data-submit-route=\"{html.escape(route)}\" data-submit-method=\"POST\">\n"
		f"{fields_html}"
		f"\t<button type=\"submit\">{html.escape(submit_label)}</button>\n"
		"\t<div class=\"form-message\" role=\"alert\" aria-live=\"polite\"></div>\n"
		"</form>\n"
	)


def sign_in_form() -> str:
	return api_form(
		"/api/auth/sign-in",
		form_field("Email", "email", "email")
		+ form_field("Password", "password", "password")
		+ form_field("Remember me", "remember_me", "checkbox"),
		"Sign in",
	)


def sign_up_form() -> str:
	return api_form(
		"/api/auth/sign-up",
		form_field("Email", "email", "email")
		+ form_field("Password", "password", "password")
		+ form_field("Repeat password", "repeat_password", "password"),
		"Create account",
	)


def password_reset_form() -> str:
	return api_form("/api/auth/password-reset", form_field("Email", "email", "email"), "Send reset link")


def update_password_form() -> str:
	return api_form(
		"/api/auth/update-password",
		form_field("New password", "password", "password")
		+ form_field("Confirm password", "confirm_password", "password"),
		"Update password",
	)


def links(items: list[tuple[str, str]]) -> str:
	return "".join(f"<p><a href=\"{html.escape(href)}\">{html.escape(label)}</a></p>\n" for href, label in items)
