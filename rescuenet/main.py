"""RescueNet FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from rescuenet.api import auth, health, sos, volunteers
from rescuenet.core.config import settings
from rescuenet.core.errors import register_error_handlers

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(volunteers.router)
app.include_router(sos.router)
