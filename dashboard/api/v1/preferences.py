from fastapi import APIRouter, Depends

from dashboard.dependencies import get_preferences
from dashboard.schemas.dashboard import ThemeResponse
from dashboard.services.preferences import PreferenceStore

router = APIRouter()


@router.get("/dashboard/theme")
async def get_theme(prefs: PreferenceStore = Depends(get_preferences)) -> ThemeResponse:
    return ThemeResponse(theme=prefs.theme)


@router.post("/dashboard/theme/toggle")
async def toggle_theme(prefs: PreferenceStore = Depends(get_preferences)) -> ThemeResponse:
    """Switch between light and dark and persist the choice."""
    return ThemeResponse(theme=prefs.toggle())
