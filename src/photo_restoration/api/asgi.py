"""ASGI entrypoint for the photo restoration API."""

from photo_restoration.api.app import create_app
from photo_restoration.containers import build_container

app = create_app(build_container())
