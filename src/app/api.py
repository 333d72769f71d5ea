import logging
import os

import flask

from app.api_context import ApiContext
from app.api_handlers import register_all
from sql.supabase_interface import SupabaseInterface
from util.fcr.file_config_reader import FileConfigReader

logger = logging.getLogger(__name__)

_AUTH_TOKEN_NAME_ = "sb-access-token"


def auth_token_name(fcr: FileConfigReader) -> str:
	conf = fcr.find("portal.conf")
	if isinstance(conf, dict) and conf.get("AUTH_COOKIE_NAME"):
		return conf["AUTH_COOKIE_NAME"]
	return _AUTH_TOKEN_NAME_


def build_context(interface: SupabaseInterface | None = None, fcr: FileConfigReader | None = None) -> ApiContext:
	fcr = fcr or FileConfigReader()
	return ApiContext(
		interface=interface or SupabaseInterface(fcr=fcr),
		fcr=fcr,
		auth_token_name=auth_token_name(fcr),
		env=os.environ,
	)


def build_api(ctx: ApiContext) -> flask.Blueprint:
	api = flask.Blueprint("api", __name__)
	register_all(api, ctx)
	logger.debug("Registered API routes (cookie %s)", ctx.auth_token_name)
	return api
