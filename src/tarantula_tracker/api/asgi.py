"""ASGI entrypoint for the tarantula tracker API."""

from tarantula_tracker.api.app import create_app
from tarantula_tracker.containers import build_container

app = create_app(build_container())
