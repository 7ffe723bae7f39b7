"""
Layout Routes - Render, cache and layout listing endpoints
"""

import logging

from flask import Blueprint, request

from api_responses import success_response, error_response, handle_api_errors, ErrorCode
from environment import get_pipeline_env
from services.layout_render_service import LayoutRenderService

logger = logging.getLogger("main")

layouts_bp = Blueprint("layouts", __name__, url_prefix="/api")


@layouts_bp.route("/layouts")
@handle_api_errors
def list_layouts_api():
    """Active layouts with their output file, limit and style"""
    config = get_pipeline_env().layout_registry.get_active_layouts()
    return success_response(data=[layout.to_dict() for layout in config.all_active])


@layouts_bp.post("/layouts/render")
@handle_api_errors
def render_layouts_api():
    """Render every active layout now, or queue the render with ?background=true"""
    if request.args.get("background", "false").lower() == "true":
        try:
            from tasks import render_layouts_task

            task = render_layouts_task.delay()
        except Exception as e:
            logger.error(f"Could not queue layout render: {e}")
            return error_response(
                ErrorCode.SERVICE_UNAVAILABLE, message="Background rendering is unavailable", status_code=503
            )
        return success_response(data={"task_id": task.id}, message="Layout render queued", status_code=202)

    report = LayoutRenderService(get_pipeline_env()).render_report()
    return success_response(data=report.to_dict())


@layouts_bp.post("/layouts/cache/clear")
@handle_api_errors
def clear_layout_caches_api():
    cleared = get_pipeline_env().clear_caches()
    logger.info(f"Pipeline caches cleared: {cleared}")
    return success_response(data={"cleared": cleared}, message="Caches cleared")


@layouts_bp.route("/layouts/cache/stats")
@handle_api_errors
def layout_cache_stats_api():
    return success_response(data=get_pipeline_env().cache.stats())
