import sys
import os

# Add app directory to path BEFORE any imports
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

import structlog

from celery_app import celery

logger = structlog.get_logger("main")

_worker_app = None


def create_app_context():
    """Create the Flask app once per worker process for database access"""
    global _worker_app
    if _worker_app is None:
        from app import create_app

        _worker_app = create_app()
    return _worker_app


@celery.task(name="tasks.render_layouts_task")
def render_layouts_task():
    """Render and publish every active layout in the background"""
    from environment import get_pipeline_env
    from services.layout_render_service import LayoutRenderService

    app = create_app_context()
    with app.app_context():
        logger.info("Starting background layout render")
        report = LayoutRenderService(get_pipeline_env()).render_report()
        logger.info(f"Background layout render finished in {report.total_time_ms}ms")
        return report.to_dict()
