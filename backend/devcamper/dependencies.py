"""
DevCamper API — Application-State Dependencies
===============================================

The application factory stores its collaborators on `app.state`; these small
dependencies hand them to route handlers, so tests can swap any of them by
passing a different object to `create_app`.
"""

from fastapi import Request

from devcamper.auth.tokens import TokenCodec
from devcamper.config import Settings
from devcamper.services.file_service import PhotoStore
from devcamper.services.geocoder import Geocoder


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder


def get_photo_store(request: Request) -> PhotoStore:
    return request.app.state.photo_store
