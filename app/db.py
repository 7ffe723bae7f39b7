from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import inspect
import logging

from constants import TABLE_CACHE_KEY, TABLE_CACHE_TTL

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()


def to_dict(db_results):
    return {c.name: getattr(db_results, c.name) for c in db_results.__table__.columns}


def init_db(app):
    """Bind the SQLAlchemy handle and create missing tables"""
    db.init_app(app)
    with app.app_context():
        # Models must be imported before create_all sees them
        import models  # noqa: F401

        db.create_all()
        logger.info(f"Database initialized: {app.config.get('SQLALCHEMY_DATABASE_URI')}")


def ensure_mirror_table(cache, ttl=TABLE_CACHE_TTL):
    """
    Make sure the articles_groups table exists, probing the schema at most once per TTL window

    Args:
        cache: TTLCache holding the table-existence entry
        ttl: Seconds before the schema is probed again

    Returns:
        True when the table exists (or was created), False if the probe failed
    """
    if cache.get(TABLE_CACHE_KEY):
        return True

    from models.articles_groups import ArticlesGroups

    try:
        if not inspect(db.engine).has_table(ArticlesGroups.__tablename__):
            logger.info("Creating articles_groups table...")
            ArticlesGroups.__table__.create(db.engine, checkfirst=True)
            logger.info("Created articles_groups table")
        cache.set(TABLE_CACHE_KEY, True, ttl)
        return True
    except Exception as e:
        logger.error(f"Error checking/creating articles_groups table: {e}")
        return False
