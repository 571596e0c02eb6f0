from fastapi import Request

from dashboard.services.preferences import PreferenceStore
from dashboard.services.refresh import RefreshController


def get_refresh_controller(request: Request) -> RefreshController:
    """Return the refresh controller stored on app state during lifespan."""
    return request.app.state.refresh_controller


def get_preferences(request: Request) -> PreferenceStore:
    return request.app.state.preferences
