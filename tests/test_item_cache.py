"""
Tests for the classified item cache
"""
import pytest
from unittest.mock import MagicMock

from cache_service import TTLCache
from exceptions import MirrorStoreException
from item_cache import ItemCache, group_by_flag

from conftest import make_article


class TestGroupByFlag:

    def test_groups_every_yes_flag(self):
        records = [
            {'article_id': 1, 'highlight1_flag': 'Yes', 'articlegroup2_flag': 'Yes'},
            {'article_id': 2, 'highlight1_flag': 'Yes', 'articlegroup2_flag': 'No'},
            {'article_id': 3, 'highlight1_flag': 'No', 'articlegroup2_flag': None},
        ]

        by_flag = group_by_flag(records)

        assert [r['article_id'] for r in by_flag['highlight1_flag']] == [1, 2]
        assert [r['article_id'] for r in by_flag['articlegroup2_flag']] == [1]
        assert 'highlight2_flag' not in by_flag


class TestItemCache:
    """Tests for the scan-once-per-TTL behaviour"""

    def test_scans_once_per_ttl_window(self, fake_clock):
        repository = MagicMock()
        repository.get_all_active.return_value = [{'article_id': 1, 'highlight1_flag': 'Yes'}]
        item_cache = ItemCache(TTLCache(clock=fake_clock), ttl=60, repository=repository)

        first = item_cache.get_classified_items()
        fake_clock.advance(59)
        second = item_cache.get_classified_items()

        assert first is second
        assert repository.get_all_active.call_count == 1

        fake_clock.advance(1)
        item_cache.get_classified_items()
        assert repository.get_all_active.call_count == 2

    def test_invalidate_forces_rescan(self, fake_clock):
        repository = MagicMock()
        repository.get_all_active.return_value = []
        item_cache = ItemCache(TTLCache(clock=fake_clock), repository=repository)

        item_cache.get_classified_items()
        assert item_cache.invalidate() is True
        item_cache.get_classified_items()

        assert repository.get_all_active.call_count == 2

    def test_scan_failure_raises_mirror_store_exception(self, fake_clock):
        repository = MagicMock()
        repository.get_all_active.side_effect = Exception('no such table: articles_groups')
        item_cache = ItemCache(TTLCache(clock=fake_clock), repository=repository)

        with pytest.raises(MirrorStoreException):
            item_cache.get_classified_items()

    def test_reads_active_rows_newest_first(self, env, classifier):
        classifier.classify(make_article(1, highlight1_flag='Yes', issue_date=100), 'create')
        classifier.classify(make_article(2, highlight1_flag='Yes', issue_date=300), 'create')
        classifier.classify(make_article(3, highlight1_flag='Yes', issue_date=200, active='No'), 'create')

        items = env.item_cache.get_classified_items()

        assert [r['article_id'] for r in items.all] == [2, 1]
        assert [r['article_id'] for r in items.by_flag['highlight1_flag']] == [2, 1]
