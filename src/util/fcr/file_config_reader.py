from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_SRC_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DIRS = (
	_SRC_ROOT / "config",
	_SRC_ROOT / "util" / "integrations" / "email" / "templates",
)


class FileConfigReader:
	"""
	Locates config files by name and parses them by extension:
	- .json       -> dict/list
	- .conf/.cfg  -> key=value dict (blank lines and '#' comments ignored)
	- anything else -> raw text

	Extra search directories can be supplied through PORTAL_CONFIG_DIR
	(os.pathsep separated); they take priority over the bundled ones.
	"""

	def __init__(self, search_dirs: list[Path | str] | None = None):
		dirs: list[Path] = []
		env_dirs = (os.environ.get("PORTAL_CONFIG_DIR") or "").strip()
		if env_dirs:
			dirs.extend(Path(p) for p in env_dirs.split(os.pathsep) if p.strip())
		dirs.extend(Path(p) for p in (search_dirs or _DEFAULT_DIRS))
		self.search_dirs = dirs
		self._cache: dict[str, Any] = {}

	def resolve(self, filename: str) -> Path | None:
		for base in self.search_dirs:
			path = base / filename
			if path.is_file():
				return path
		return None

	def find(self, filename: str) -> Any:
		"""Return the parsed contents of filename, or None when it does not exist."""
		if filename in self._cache:
			return self._cache[filename]
		path = self.resolve(filename)
		if path is None:
			logger.debug("Config file '%s' not found in %s", filename, self.search_dirs)
			return None
		value = self._parse(path)
		self._cache[filename] = value
		return value

	def clear_cache(self) -> None:
		self._cache.clear()

	@staticmethod
	def parse_kv(raw: str) -> dict[str, str]:
		out: dict[str, str] = {}
		for line in raw.splitlines():
			s = line.strip()
			if not s or s.startswith("#"):
				continue
			if "=" not in s:
				raise ValueError(f"Invalid config line: '{line}'")
			k, v = s.split("=", 1)
			out[k.strip()] = v.strip()
		return out

	def _parse(self, path: Path) -> Any:
		raw = path.read_text(encoding="utf-8")
		suffix = path.suffix.lower()
		if suffix == ".json":
			return json.loads(raw)
		if suffix in (".conf", ".cfg"):
			return self.parse_kv(raw)
		return raw
