from __future__ import annotations

from app.api_context import ApiContext


def register_all(api, ctx: ApiContext) -> None:
	from app.api_handlers import (
		auth,
		navigation,
		ping,
		services,
		user_approval,
	)

	ping.register(api, ctx)
	auth.register(api, ctx)
	navigation.register(api, ctx)
	user_approval.register(api, ctx)
	services.register(api, ctx)
