from util.webpage_builder import html_fragments as frag
from util.webpage_builder import parent_builder


def _builder(page_title: str = "", routes: list[dict] | None = None, current_path: str = "") -> parent_builder.WebPageBuilder:
	builder = parent_builder.WebPageBuilder()
	builder.load_page_config("default")
	builder.page_title = page_title
	if routes:
		builder._build_nav_html(routes, current_path)
	return builder


def build_landing_page(app_name: str, featured: list[dict]) -> str:
	builder = _builder()
	builder._add_main_content_html(frag.page_header(app_name, "Your self-hosted services in one place."))
	builder._add_main_content_html(frag.service_grid("".join(frag.service_card(s) for s in featured)))
	builder._add_main_content_html("<p><a href='/auth/sign-in'>Sign in</a></p>\n")
	return builder.serve_html()


def build_sign_in_page() -> str:
	builder = _builder("Sign in")
	builder._add_main_content_html(frag.heading("Sign in", 1))
	builder._add_main_content_html(frag.sign_in_form())
	builder._add_main_content_html(frag.links([("/auth/sign-up", "Create an account"), ("/auth/password-reset", "Forgot your password?")]))
	return builder.serve_html()


def build_sign_up_page() -> str:
	builder = _builder("Sign up")
	builder._add_main_content_html(frag.heading("Create an account", 1))
	builder._add_main_content_html(frag.sign_up_form())
	builder._add_main_content_html(frag.links([("/auth/sign-in", "Already have an account? Sign in")]))
	return builder.serve_html()


def build_password_reset_page() -> str:
	builder = _builder("Reset password")
	builder._add_main_content_html(frag.heading("Reset your password", 1))
	builder._add_main_content_html(frag.password_reset_form())
	builder._add_main_content_html(frag.links([("/auth/sign-in", "Back to sign in")]))
	return builder.serve_html()


def build_update_password_page() -> str:
	builder = _builder("Update password")
	builder._add_main_content_html(frag.heading("Choose a new password", 1))
	builder._add_main_content_html(frag.update_password_form())
	builder._add_main_content_html(frag.links([("/home", "Back to Home Page")]))
	return builder.serve_html()


def build_home_page(user: dict, services: list[dict], routes: list[dict]) -> str:
	builder = _builder("Home", routes, "/home")
	name = (user.get("account") or {}).get("name") or user.get("email") or "there"
	builder._add_main_content_html(frag.page_header(f"Welcome, {name}", "Open any of your services below."))
	builder._add_main_content_html(frag.service_grid("".join(frag.service_card(s) for s in services)))
	return builder.serve_html()


def build_admin_users_page(
	pending: list[dict],
	approved: list[dict],
	statistics: dict | None,
	routes: list[dict],
) -> str:
	builder = _builder("User Management", routes, "/home/admin/users")
	builder._add_main_content_html(frag.page_header("User Management", "Review and approve account requests."))
	if statistics is not None:
		builder._add_main_content_html(frag.stat_grid("".join(
			frag.stat_card(label.title(), statistics.get(label, 0))
			for label in ("pending", "approved", "rejected", "total")
		)))

	pending_cards = "".join(
		frag.approval_card(
			u.get("name") or "",
			u.get("email") or "",
			"Pending",
			frag.approval_row("Requested", u.get("requested_at") or "")
			+ frag.approval_row("Email confirmed", u.get("email_confirmed_at") or ""),
			frag.approval_actions(u.get("id") or ""),
		)
		for u in pending
	)
	builder._add_main_content_html(frag.approval_section("Pending", pending_cards, "No pending requests."))

	approved_cards = "".join(
		frag.approval_card(
			u.get("name") or "",
			u.get("email") or "",
			"Approved",
			frag.approval_row("Approved", u.get("approved_at") or "")
			+ frag.approval_row("Approved by", u.get("approved_by_email") or u.get("approved_by") or ""),
		)
		for u in approved
	)
	builder._add_main_content_html(frag.approval_section("Approved", approved_cards, "No approved users yet."))
	return builder.serve_html()


def build_admin_services_page(settings: list[dict], summary: dict, routes: list[dict]) -> str:
	builder = _builder("Service Settings", routes, "/home/admin/services")
	builder._add_main_content_html(frag.page_header("Service Settings", "Configure the services available to members."))
	builder._add_main_content_html(frag.stat_grid(
		frag.stat_card("Online", summary.get("online", 0)) + frag.stat_card("Services", summary.get("total", 0))
	))
	builder._add_main_content_html(frag.service_settings_table("".join(frag.service_settings_row(s) for s in settings)))
	return builder.serve_html()


def build_error_page(code: int, description: str) -> str:
	builder = _builder(f"Error {code}")
	builder._add_main_content_html(frag.error_header(code, description))
	builder._add_main_content_html(frag.return_home())
	return builder.serve_html()
