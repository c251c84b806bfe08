import random

import httpx
from fastapi import FastAPI

from santa_redraw.routes_draw import register_draw_routes
from santa_redraw.settings import AppSettings


def create_app(
    settings: AppSettings,
    rng: random.Random | None = None,
    mail_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    app = FastAPI(title="Secret Santa redraw")
    register_draw_routes(app, settings, rng=rng, mail_transport=mail_transport)
    return app
