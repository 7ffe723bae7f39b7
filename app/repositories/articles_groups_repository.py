"""
Repository for the articles_groups mirror table
Every statement is a parameterized SELECT/INSERT/UPDATE/DELETE against the table
"""

import logging
from sqlalchemy import and_, case, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from db import db, to_dict
from constants import ALL_FLAGS, FLAG_YES
from metrics import track_db_query
from models.articles_groups import ArticlesGroups

logger = logging.getLogger("main")


def _flag_column(flag_name):
    if flag_name not in ALL_FLAGS:
        raise ValueError(f"Unknown flag column: {flag_name}")
    return getattr(ArticlesGroups, flag_name)


class ArticlesGroupsRepository:
    """Repository for articles_groups database operations"""

    @staticmethod
    def get_by_article_id(article_id):
        """Get the mirror record for an article as a dict, or None"""
        row = db.session.get(ArticlesGroups, article_id)
        return to_dict(row) if row else None

    @staticmethod
    def exists(article_id):
        stmt = select(ArticlesGroups.article_id).where(ArticlesGroups.article_id == article_id)
        return db.session.execute(stmt).first() is not None

    @staticmethod
    @track_db_query("scan")
    def get_all_active():
        """All active mirror records, newest issue first"""
        stmt = (
            select(ArticlesGroups)
            .where(ArticlesGroups.active == FLAG_YES)
            .order_by(ArticlesGroups.issue_date.desc())
        )
        return [to_dict(row) for row in db.session.execute(stmt).scalars().all()]

    @staticmethod
    @track_db_query("insert")
    def insert(values):
        """Insert a full mirror record"""
        try:
            db.session.execute(insert(ArticlesGroups).values(**values))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    @track_db_query("update")
    def update_flags(article_id, flags, last_update_date):
        """Rewrite only the flag columns and the last-modified timestamp"""
        for flag_name in flags:
            _flag_column(flag_name)
        stmt = (
            update(ArticlesGroups)
            .where(ArticlesGroups.article_id == article_id)
            .values(last_update_date=last_update_date, **flags)
        )
        try:
            result = db.session.execute(stmt)
            db.session.commit()
            return result.rowcount
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    @track_db_query("delete")
    def delete(article_id):
        """Delete the mirror record for an article; True if a row was removed"""
        try:
            result = db.session.execute(delete(ArticlesGroups).where(ArticlesGroups.article_id == article_id))
            db.session.commit()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    @track_db_query("batch_count")
    def count_flags_excluding(flag_names, article_id):
        """
        Count rows holding each flag as "Yes", ignoring the given article, in one query

        SELECT SUM(CASE WHEN <flag> = 'Yes' AND article_id != :id THEN 1 ELSE 0 END) AS <flag>_count, ...

        Returns:
            Dict of flag name -> count
        """
        if not flag_names:
            return {}
        columns = [
            func.sum(
                case((and_(_flag_column(name) == FLAG_YES, ArticlesGroups.article_id != article_id), 1), else_=0)
            ).label(f"{name}_count")
            for name in flag_names
        ]
        try:
            row = db.session.execute(select(*columns)).mappings().first()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e
        return {name: int((row or {}).get(f"{name}_count") or 0) for name in flag_names}

    @staticmethod
    @track_db_query("count")
    def count_flag_excluding(flag_name, article_id):
        """SELECT COUNT(*) for a single flag, ignoring the given article"""
        stmt = select(func.count()).select_from(ArticlesGroups).where(
            _flag_column(flag_name) == FLAG_YES, ArticlesGroups.article_id != article_id
        )
        try:
            return db.session.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def count():
        """Count total mirror records"""
        return db.session.execute(select(func.count()).select_from(ArticlesGroups)).scalar() or 0
