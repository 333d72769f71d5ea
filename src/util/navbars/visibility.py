from __future__ import annotations

import copy

from util.fcr.file_config_reader import FileConfigReader

ADMIN_SECTION_LABEL = "Administration"
ADMIN_PATH_MARKER = "/admin/"
ADMIN_PATH_PREFIX = "/home/admin"


def _is_admin_path(path: str) -> bool:
	return ADMIN_PATH_MARKER in path


def filter_admin_routes(routes: list[dict], is_admin: bool) -> list[dict]:
	"""
	Remove admin-only entries from a sidebar route tree for non-admins.

	- The "Administration" section is shown to admins only.
	- Other sections lose children whose path contains "/admin/" and are
	  dropped when nothing is left.
	- Top-level routes with an admin path are dropped.
	- Dividers and other entries without a path are kept.
	"""
	filtered: list[dict] = []
	for route in routes:
		if not isinstance(route, dict):
			continue

		if "children" in route:
			if route.get("label") == ADMIN_SECTION_LABEL:
				if is_admin:
					filtered.append(copy.deepcopy(route))
				continue

			children = [
				copy.deepcopy(child)
				for child in route.get("children") or []
				if not (isinstance(child, dict) and "path" in child)
				or is_admin
				or not _is_admin_path(str(child["path"]))
			]
			if not children:
				continue
			section = dict(route)
			section["children"] = children
			filtered.append(section)
			continue

		path = route.get("path")
		if isinstance(path, str):
			if is_admin or not _is_admin_path(path):
				filtered.append(copy.deepcopy(route))
			continue

		filtered.append(copy.deepcopy(route))
	return filtered


def filter_navigation_by_access(items: list[dict], is_admin: bool) -> list[dict]:
	"""Flat navigation lists: non-admins lose items under /home/admin."""
	if is_admin:
		return list(items)
	return [
		item for item in items
		if not item.get("path") or not str(item["path"]).startswith(ADMIN_PATH_PREFIX)
	]


def load_navigation_config(fcr: FileConfigReader | None = None, name: str = "navigation.json") -> dict:
	conf = (fcr or FileConfigReader()).find(name)
	if not isinstance(conf, dict):
		return {"routes": []}
	return conf


def build_navigation_for(is_admin: bool, fcr: FileConfigReader | None = None) -> dict:
	config = load_navigation_config(fcr)
	out = dict(config)
	out["routes"] = filter_admin_routes(config.get("routes") or [], is_admin)
	return out
