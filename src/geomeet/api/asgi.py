"""ASGI entrypoint, e.g. ``uvicorn geomeet.api.asgi:app``."""

from geomeet.api.app import create_app
from geomeet.containers import build_container

app = create_app(build_container())
