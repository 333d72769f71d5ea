import html
import logging

from flask import render_template_string

from util.fcr.file_config_reader import FileConfigReader

logger = logging.getLogger(__name__)

fcr = FileConfigReader()


class WebPageBuilder:
	def __init__(self, template_name: str = "default.html", reader: FileConfigReader | None = None):
		self.fcr = reader or fcr

		self.meta_title = "Marnix 13"
		self.page_title = ""
		self.stylesheets: set[str] = set()
		self.scripts: set[str] = set()

		self.template_src: str = self.fcr.find(template_name) or ""

		# Values handed to the template; html values are marked safe at render time.
		self.config_values: dict[str, str] = {}

	def load_page_config(self, config_name: str) -> None:
		"""
		Load page configuration from <config_name>.json:
		  - "meta_title": plain string
		  - "stylesheets" / "scripts": lists of hrefs
		  - anything else is copied into config_values as a string
		"""
		config = self.fcr.find(f"{config_name}.json")
		if not isinstance(config, dict):
			logger.debug("No page config '%s'", config_name)
			return

		for key, raw in config.items():
			if key == "meta_title":
				self.meta_title = str(raw)
			elif key == "stylesheets":
				self.stylesheets.update(raw or [])
			elif key == "scripts":
				self.scripts.update(raw or [])
			else:
				self.config_values[key] = "" if raw is None else str(raw)

	def _build_replacement_dict(self) -> dict[str, str]:
		values: dict[str, str] = dict(self.config_values)
		values.setdefault("stylesheets_html", "\n".join(
			f'<link rel="stylesheet" href="{html.escape(href)}">' for href in sorted(self.stylesheets)
		))
		values.setdefault("scripts_html", "\n".join(
			f'<script src="{html.escape(src)}"></script>' for src in sorted(self.scripts)
		))
		values.setdefault("nav_html", "")
		values.setdefault("body_html", "")
		return values

	def serve_html(self) -> str:
		values = self._build_replacement_dict()
		title = f"{self.page_title} | {self.meta_title}" if self.page_title else self.meta_title
		return render_template_string(self.template_src, meta_title=title, **values)

	def _build_nav_html(self, routes: list[dict], current_path: str = "") -> None:
		"""Render an already-filtered navigation tree into the sidebar."""
		parts: list[str] = ['<nav class="sidebar">']
		for route in routes:
			if route.get("divider"):
				parts.append('<hr class="sidebar__divider">')
				continue
			children = route.get("children")
			if children is not None:
				parts.append('<div class="sidebar__section">')
				parts.append(f'<div class="sidebar__label">{html.escape(str(route.get("label", "")))}</div>')
				parts.extend(self._nav_link(child, current_path) for child in children if child.get("path"))
				parts.append("</div>")
			elif route.get("path"):
				parts.append(self._nav_link(route, current_path))
		parts.append("</nav>")
		self.config_values["nav_html"] = "\n".join(parts)

	@staticmethod
	def _nav_link(entry: dict, current_path: str) -> str:
		path = str(entry["path"])
		active = ' class="is-active"' if path == current_path else ""
		return f'<a href="{html.escape(path)}"{active}>{html.escape(str(entry.get("label", path)))}</a>'

	def _add_main_content_html(self, content_html: str) -> None:
		existing = self.config_values.get("body_html", "")
		self.config_values["body_html"] = existing + content_html
