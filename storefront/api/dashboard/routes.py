from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dashboard.service import DashboardService
from storefront.database.connection import get_db
from storefront.dependencies.auth import admin_only
from storefront.dependencies.cache import get_cache
from storefront.shared.cache_service import CacheContext
from storefront.shared.responses import success_response

dashboard_router = APIRouter(
    prefix="/api/v1/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(admin_only)],
)


def get_dashboard_service(
    session: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[CacheContext, Depends(get_cache)],
) -> DashboardService:
    return DashboardService(session, cache)


DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard_service)]


@dashboard_router.get("/stats", summary="Headline figures for the admin dashboard")
async def get_stats(service: DashboardServiceDep):
    return success_response(await service.get_stats())


@dashboard_router.get("/pie", summary="Pie chart data")
async def get_pie_charts(service: DashboardServiceDep):
    return success_response(await service.get_pie_charts())


@dashboard_router.get("/bar", summary="Bar chart data")
async def get_bar_charts(service: DashboardServiceDep):
    return success_response(await service.get_bar_charts())


@dashboard_router.get("/line", summary="Line chart data")
async def get_line_charts(service: DashboardServiceDep):
    return success_response(await service.get_line_charts())
