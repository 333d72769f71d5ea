from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from sql.supabase_interface import SupabaseInterface
from util.fcr.file_config_reader import FileConfigReader


@dataclass
class ApiContext:
	interface: SupabaseInterface
	fcr: FileConfigReader
	auth_token_name: str = "sb-access-token"
	env: Mapping[str, str] | None = field(default=None, repr=False)
