"""
Article Groups - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class ArticleGroupsException(Exception):
    """Base exception for the article groups pipeline"""
    def __init__(self, message: str, code: str = "ARTICLE_GROUPS_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {
            'error': True,
            'code': self.code,
            'message': self.message
        }


class LayoutConfigException(ArticleGroupsException):
    """Layout source missing or malformed"""
    def __init__(self, message: str):
        super().__init__(message, code="LAYOUT_CONFIG_ERROR")
        logger.warning(f"Layout config error: {message}")


class TemplateException(ArticleGroupsException):
    """Sort spec or template body that cannot be rendered"""
    def __init__(self, message: str, layout_name: str = None):
        self.layout_name = layout_name
        super().__init__(message, code="TEMPLATE_ERROR")
        logger.error(f"Template error ({layout_name}): {message}")


class MirrorStoreException(ArticleGroupsException):
    """articles_groups table unreadable"""
    def __init__(self, message: str):
        super().__init__(message, code="MIRROR_STORE_ERROR")
        logger.error(f"Mirror store error: {message}")


class ArtifactWriteException(ArticleGroupsException):
    """Object store rejected an artifact"""
    def __init__(self, message: str, key: str = None):
        self.key = key
        super().__init__(message, code="ARTIFACT_WRITE_ERROR")
        logger.error(f"Artifact write error ({key}): {message}")


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        return jsonify({
            'error': True,
            'code': e.name.upper().replace(' ', '_'),
            'message': e.description
        }), e.code

    @app.errorhandler(ArticleGroupsException)
    def handle_article_groups_exception(e):
        """Handle pipeline exceptions"""
        return jsonify(e.to_dict()), 400

    @app.errorhandler(LayoutConfigException)
    def handle_layout_config_exception(e):
        return jsonify(e.to_dict()), 422

    @app.errorhandler(MirrorStoreException)
    def handle_mirror_store_exception(e):
        return jsonify(e.to_dict()), 503

    @app.errorhandler(ArtifactWriteException)
    def handle_artifact_write_exception(e):
        return jsonify(e.to_dict()), 502

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'error': True,
            'code': 'INTERNAL_ERROR',
            'message': 'An unexpected error occurred'
        }), 500
