"""Classification of articles into highlight and ArticleGroup slots.

For every create/update the article's highlight flags and the active
ArticleGroup layouts are turned into "Yes"/"No" flags, capacity limits are
checked with one batched count query, and the articles_groups mirror row is
upserted (or deleted when no flag survives). Capacity checks are
read-then-write without locking: two concurrent writers can both be admitted,
and the overshoot is corrected the next time either article is saved.

Nothing in here raises to the caller; the article CRUD operation must finish
whatever happens to the mirror table.
"""

import logging
from typing import Dict, List, Optional, Tuple

from constants import (
    ALL_FLAGS,
    ARTICLEGROUP_FLAG_COUNT,
    ARTICLEGROUP_LAYOUT_PREFIX,
    FLAG_NO,
    FLAG_YES,
    HIGHLIGHT_FLAG_COUNT,
    HIGHLIGHT_LAYOUT_PREFIX,
)
from db import ensure_mirror_table
from metrics import capacity_denials_total, classifications_total
from repositories.articles_groups_repository import ArticlesGroupsRepository
from utils import is_yes, to_number
from where_clause import matches_where_clause

logger = logging.getLogger("main")

OPERATIONS = ("create", "update", "delete")

_INTEGER_FIELDS = (
    "issue_date",
    "starting_date",
    "ending_date",
    "sub_menu_id",
    "created_by",
    "creation_date",
    "last_updated_by",
)
_TEXT_FIELDS = ("menu", "heading", "body", "picture_location", "picture2_location", "by_line", "unique_file")


def _as_int(value):
    number = to_number(value)
    return int(number) if number is not None else None


class ClassificationService:
    def __init__(self, env, repository=ArticlesGroupsRepository):
        self.env = env
        self.repository = repository

    def classify(self, item: Dict, operation: str) -> Optional[Dict[str, str]]:
        """
        Recompute the article's group memberships and sync the mirror row

        Returns:
            The resolved flag map, or None for deletes, skipped items and errors
        """
        article_id = item.get("article_id") if item else None
        if operation not in OPERATIONS:
            logger.warning(f"Unknown classification operation {operation!r} for article {article_id}")
            return None
        if not article_id:
            logger.warning("No article_id found in data for articles_groups sync")
            classifications_total.labels(operation=operation, outcome="skipped").inc()
            return None

        try:
            if operation == "delete":
                self.repository.delete(article_id)
                logger.info(f"Deleted articles_groups record for article_id: {article_id}")
                classifications_total.labels(operation=operation, outcome="deleted").inc()
                return None

            flags = self.resolve_flags(item)

            if not any(value == FLAG_YES for value in flags.values()):
                removed = self.repository.delete(article_id)
                logger.info(
                    f"No flags set for article {article_id}, "
                    f"{'deleted' if removed else 'no'} articles_groups record"
                )
                classifications_total.labels(operation=operation, outcome="deleted").inc()
                return flags

            self.upsert(item, article_id, flags)
            classifications_total.labels(operation=operation, outcome="upserted").inc()
            return flags
        except Exception as e:
            logger.error(f"Error syncing to articles_groups for article {article_id}: {e}", exc_info=True)
            classifications_total.labels(operation=operation, outcome="error").inc()
            return None

    def resolve_flags(self, item: Dict) -> Dict[str, str]:
        """Final "Yes"/"No" value for every flag column, capacity limits applied"""
        config = self.env.layout_registry.get_active_layouts()
        ensure_mirror_table(self.env.cache, self.env.table_ttl)

        flags, candidates = self.collect_candidates(item, config)
        if candidates:
            allowed = self.check_capacity(candidates, item["article_id"])
            for flag_name, _ in candidates:
                flags[flag_name] = FLAG_YES if allowed.get(flag_name, True) else FLAG_NO
            logger.debug(f"Batch processed {len(candidates)} flags")
        return {name: flags[name] for name in ALL_FLAGS}

    def collect_candidates(self, item: Dict, config) -> Tuple[Dict[str, str], List[Tuple[str, object]]]:
        """
        Split flags into settled values and candidates that need a capacity check

        A highlight flag is only a candidate when the article already holds it;
        an ArticleGroup flag is a candidate when its active layout's where_clause
        matches (no clause matches everything).
        """
        flags: Dict[str, str] = {}
        candidates = []

        for i in range(1, HIGHLIGHT_FLAG_COUNT + 1):
            flag_name = f"highlight{i}_flag"
            if not is_yes(item.get(flag_name)):
                flags[flag_name] = FLAG_NO
                continue
            layout = config.by_name.get(f"{HIGHLIGHT_LAYOUT_PREFIX}{i}")
            if layout and layout.layout_limit > 0:
                candidates.append((flag_name, layout))
            else:
                flags[flag_name] = FLAG_YES

        groups = {layout.layout_name: layout for layout in config.article_groups}
        for i in range(1, ARTICLEGROUP_FLAG_COUNT + 1):
            flag_name = f"articlegroup{i}_flag"
            layout = groups.get(f"{ARTICLEGROUP_LAYOUT_PREFIX}{i}")
            if layout is None:
                flags[flag_name] = FLAG_NO
                continue
            included = matches_where_clause(item, layout.where_clause) if layout.where_clause else True
            if not included:
                flags[flag_name] = FLAG_NO
            elif layout.layout_limit > 0:
                candidates.append((flag_name, layout))
            else:
                flags[flag_name] = FLAG_YES

        return flags, candidates

    def check_capacity(self, candidates, article_id) -> Dict[str, bool]:
        """
        One batched count for all candidates; per-flag counts if that query fails

        Returns:
            Dict of flag name -> admitted
        """
        try:
            counts = self.repository.count_flags_excluding([name for name, _ in candidates], article_id)
            allowed = {name: counts.get(name, 0) < layout.layout_limit for name, layout in candidates}
        except Exception as e:
            logger.warning(f"Batch layout limit check failed, falling back to per-flag checks: {e}")
            allowed = {name: self.check_single_limit(name, layout, article_id) for name, layout in candidates}

        denied = [name for name, ok in allowed.items() if not ok]
        for name in denied:
            capacity_denials_total.labels(flag=name).inc()
        if denied:
            logger.info(f"Batch check: {len(denied)}/{len(candidates)} flags denied due to limits ({', '.join(denied)})")
        return allowed

    def check_single_limit(self, flag_name, layout, article_id) -> bool:
        """Count one flag; allow on error so an editor is never blocked"""
        try:
            current = self.repository.count_flag_excluding(flag_name, article_id)
        except Exception as e:
            logger.error(f"Error checking layout limit for {flag_name}: {e}")
            return True
        logger.debug(f"Current count of articles with {flag_name}='Yes': {current}, limit: {layout.layout_limit}")
        return current < layout.layout_limit

    def upsert(self, item: Dict, article_id, flags: Dict[str, str]) -> None:
        timestamp = _as_int(item.get("last_update_date")) or self.env.clock()
        if self.repository.exists(article_id):
            self.repository.update_flags(article_id, flags, timestamp)
            logger.info(f"Optimized update completed for article_id: {article_id}")
        else:
            self.repository.insert(self.build_mirror_values(item, article_id, flags, timestamp))
            logger.info(f"Created articles_groups record for article_id: {article_id}")

    def build_mirror_values(self, item: Dict, article_id, flags: Dict[str, str], timestamp) -> Dict:
        values = {"article_id": article_id}
        for field in _INTEGER_FIELDS:
            values[field] = _as_int(item.get(field))
        for field in _TEXT_FIELDS:
            values[field] = item.get(field) or ""
        values["active"] = item.get("active") or FLAG_YES
        values["creation_date"] = values["creation_date"] or timestamp
        values["last_update_date"] = timestamp
        values.update(flags)
        return values
