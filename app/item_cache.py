"""
Item Cache
One scan of articles_groups per TTL window, pre-grouped by every flag set to "Yes"
"""

import logging
from typing import Dict, List, NamedTuple

from constants import ITEMS_CACHE_KEY, ITEMS_CACHE_TTL
from exceptions import MirrorStoreException
from repositories.articles_groups_repository import ArticlesGroupsRepository
from utils import is_yes

logger = logging.getLogger("main")


class ClassifiedItems(NamedTuple):
    all: List[Dict]
    by_flag: Dict[str, List[Dict]]


def group_by_flag(records: List[Dict]) -> Dict[str, List[Dict]]:
    by_flag: Dict[str, List[Dict]] = {}
    for record in records:
        for key, value in record.items():
            if key.endswith("_flag") and is_yes(value):
                by_flag.setdefault(key, []).append(record)
    return by_flag


class ItemCache:
    def __init__(self, cache, ttl=ITEMS_CACHE_TTL, repository=ArticlesGroupsRepository):
        self.cache = cache
        self.ttl = ttl
        self.repository = repository

    def get_classified_items(self) -> ClassifiedItems:
        cached = self.cache.get(ITEMS_CACHE_KEY)
        if cached is not None:
            logger.debug(f"Using cached articles ({len(cached.all)} articles, {len(cached.by_flag)} groups)")
            return cached

        try:
            records = self.repository.get_all_active()
        except Exception as e:
            raise MirrorStoreException(f"Could not read articles_groups: {e}") from e

        items = ClassifiedItems(all=records, by_flag=group_by_flag(records))
        self.cache.set(ITEMS_CACHE_KEY, items, self.ttl)
        logger.info(f"Articles cache built: {len(items.all)} articles, {len(items.by_flag)} flag groups")
        return items

    def invalidate(self) -> bool:
        return self.cache.invalidate(ITEMS_CACHE_KEY)
