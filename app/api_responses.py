"""
API Response Utilities - JSON envelopes shared by the layout and hook endpoints
"""

from flask import jsonify
from functools import wraps
import logging

from exceptions import (
    ArticleGroupsException,
    ArtifactWriteException,
    LayoutConfigException,
    MirrorStoreException,
)

logger = logging.getLogger("main")


class ErrorCode:
    SUCCESS = "SUCCESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    PIPELINE_ERROR = "PIPELINE_ERROR"


# Pipeline exception -> (error code, HTTP status); first isinstance match wins
PIPELINE_ERRORS = (
    (MirrorStoreException, ErrorCode.SERVICE_UNAVAILABLE, 503),
    (ArtifactWriteException, ErrorCode.SERVICE_UNAVAILABLE, 503),
    (LayoutConfigException, ErrorCode.PIPELINE_ERROR, 422),
    (ArticleGroupsException, ErrorCode.PIPELINE_ERROR, 500),
)


def success_response(data=None, message=None, status_code=200):
    response = {"code": ErrorCode.SUCCESS, "success": True}
    if data is not None:
        response["data"] = data
    if message:
        response["message"] = message
    return jsonify(response), status_code


def error_response(error_code=ErrorCode.INTERNAL_ERROR, message=None, details=None, status_code=400):
    """
    Failure envelope: {"code", "success": false, "message", "details"?}

    Server-side failures (5xx) are logged here so handlers only build the response.
    """
    response = {"code": error_code, "success": False, "message": message or "An unexpected error occurred"}
    if details:
        response["details"] = details
    if status_code >= 500:
        logger.error(f"{error_code}: {response['message']} | Details: {details}")
    return jsonify(response), status_code


def pipeline_error_response(e):
    for exception_type, error_code, status_code in PIPELINE_ERRORS:
        if isinstance(e, exception_type):
            return error_response(error_code, message=e.message, details={"code": e.code}, status_code=status_code)
    return error_response(status_code=500)


def handle_api_errors(f):
    """
    Decorator turning exceptions raised by an endpoint into error envelopes
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ArticleGroupsException as e:
            return pipeline_error_response(e)
        except ValueError as e:
            return error_response(ErrorCode.VALIDATION_ERROR, message=str(e), status_code=400)
        except Exception as e:
            logger.error(f"Unhandled exception in {f.__name__}: {e}", exc_info=True)
            return error_response(status_code=500)

    return wrapper


def validation_error_response(field, message):
    return error_response(
        ErrorCode.VALIDATION_ERROR,
        message=f"Validation failed for field: {field}",
        details={"field": field, "error": message},
        status_code=400,
    )
