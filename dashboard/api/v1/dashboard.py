from fastapi import APIRouter, Depends

from dashboard.dependencies import get_refresh_controller
from dashboard.schemas.chart import ChartConfig
from dashboard.schemas.dashboard import (
    DashboardViewResponse,
    OutagePageResponse,
    PageNavigationRequest,
    PageNavigationResponse,
    RefreshPolicyResponse,
)
from dashboard.schemas.status import RefreshPolicy, WindowSelection
from dashboard.services.chart import build_chart_config
from dashboard.services.refresh import RefreshController
from dashboard.services.view import build_view, outage_page

router = APIRouter()


@router.get("/dashboard/view")
async def dashboard_view(
    controller: RefreshController = Depends(get_refresh_controller),
) -> DashboardViewResponse:
    """Current status, summary stats and the visible outage page."""
    return build_view(controller.session)


@router.get("/dashboard/chart")
async def dashboard_chart(
    controller: RefreshController = Depends(get_refresh_controller),
) -> ChartConfig:
    """Chart configuration for the last completed cycle (empty series before the first one)."""
    result = controller.session.result
    if result is not None:
        return result.chart
    window = controller.session.window_selection.resolve(controller.now())
    return build_chart_config([], window)


@router.get("/dashboard/outages")
async def dashboard_outages(
    controller: RefreshController = Depends(get_refresh_controller),
) -> OutagePageResponse:
    return outage_page(controller.session)


@router.post("/dashboard/outages/page")
async def navigate_outages(
    body: PageNavigationRequest,
    controller: RefreshController = Depends(get_refresh_controller),
) -> PageNavigationResponse:
    """Move to the previous/next page. Out-of-range moves are ignored."""
    moved = controller.advance_page(body.delta)
    return PageNavigationResponse(moved=moved, pagination=controller.session.paginator.state())


@router.post("/dashboard/refresh")
async def manual_refresh(
    controller: RefreshController = Depends(get_refresh_controller),
) -> DashboardViewResponse:
    """Run a manual refresh cycle. Fetch failures surface as 502."""
    await controller.refresh(manual=True)
    return build_view(controller.session)


@router.put("/dashboard/window")
async def set_window(
    body: WindowSelection,
    controller: RefreshController = Depends(get_refresh_controller),
) -> DashboardViewResponse:
    """Select a preset or custom window and reload. Zero-length windows are rejected."""
    await controller.set_window(body)
    return build_view(controller.session)


@router.get("/dashboard/refresh-policy")
async def get_refresh_policy(
    controller: RefreshController = Depends(get_refresh_controller),
) -> RefreshPolicyResponse:
    return RefreshPolicyResponse(
        interval_seconds=controller.policy.interval_seconds,
        armed=controller.state == "armed",
    )


@router.put("/dashboard/refresh-policy")
async def set_refresh_policy(
    body: RefreshPolicy,
    controller: RefreshController = Depends(get_refresh_controller),
) -> RefreshPolicyResponse:
    controller.set_policy(body)
    return RefreshPolicyResponse(
        interval_seconds=controller.policy.interval_seconds,
        armed=controller.state == "armed",
    )
