"""ASGI entrypoint for the cafe log web app."""

from cafe_log.api.app import create_app
from cafe_log.containers import build_container

app = create_app(build_container())
