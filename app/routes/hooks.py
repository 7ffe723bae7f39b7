"""
Hook Routes - The record-store hook boundary over HTTP
"""

import logging

from flask import Blueprint, request

from api_responses import success_response, validation_error_response
from hooks import HOOK_NAMES, run_hook

logger = logging.getLogger("main")

hooks_bp = Blueprint("hooks", __name__, url_prefix="/api")


@hooks_bp.post("/hooks/<module_name>/<event>")
def run_hook_api(module_name, event):
    """
    Run one lifecycle hook for a record-store module

    Body: {"data": {...}, "original": {...}}; "original" is only read by the update hooks.
    Hook failures never fail the request: the item is always handed back.
    """
    if event not in HOOK_NAMES:
        return validation_error_response("event", f"Unknown hook {event!r}")

    payload = request.get_json(silent=True) or {}
    data = payload.get("data") or {}
    original = payload.get("original") or {}

    try:
        if event in ("before_update", "after_update"):
            item = run_hook(module_name, event, data, original)
        else:
            item = run_hook(module_name, event, data)
    except Exception as e:
        logger.error(f"Hook {module_name}.{event} failed: {e}", exc_info=True)
        item = data

    return success_response(data=item)
