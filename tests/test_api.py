"""
Tests for API endpoints
"""
import json

import pytest
from unittest.mock import MagicMock, patch

from conftest import make_article


class TestLayoutEndpoints:
    """Tests for the layout render and cache endpoints"""

    def test_list_layouts(self, client, write_layouts, sample_layouts):
        write_layouts(sample_layouts)

        response = client.get('/api/layouts')
        data = json.loads(response.data)

        assert response.status_code == 200
        assert data['success'] is True
        names = [layout['layout_name'] for layout in data['data']]
        assert names == ['Highlight1', 'Highlight3', 'ArticleGroup1', 'ArticleGroup2', 'MenuTop']
        assert data['data'][1]['style'] == 'highlight'

    def test_render(self, client, env, write_layouts, sample_layouts, repository, classifier):
        write_layouts(sample_layouts)
        classifier.classify(make_article(1, highlight1_flag='Yes'), 'create')

        response = client.post('/api/layouts/render')
        data = json.loads(response.data)['data']
        env.publisher.wait_for_pending(5)

        assert response.status_code == 200
        assert data['status'] == 'success'
        assert data['performance']['articles_cached'] == 1
        assert {d['layout_name']: d['status'] for d in data['details']}['MenuTop'] == 'skipped'

    def test_render_in_background(self, client):
        with patch('tasks.render_layouts_task.delay', return_value=MagicMock(id='task-1')) as delay:
            response = client.post('/api/layouts/render?background=true')

        assert response.status_code == 202
        assert json.loads(response.data)['data'] == {'task_id': 'task-1'}
        delay.assert_called_once_with()

    def test_render_in_background_without_broker(self, client):
        with patch('tasks.render_layouts_task.delay', side_effect=Exception('Connection refused')):
            response = client.post('/api/layouts/render?background=true')

        assert response.status_code == 503
        assert json.loads(response.data)['code'] == 'SERVICE_UNAVAILABLE'

    def test_render_scan_failure(self, client, env, write_layouts, sample_layouts):
        write_layouts(sample_layouts)

        with patch.object(env.item_cache.repository, 'get_all_active', side_effect=Exception('db down')):
            response = client.post('/api/layouts/render')

        assert response.status_code == 503
        assert json.loads(response.data)['details'] == {'code': 'MIRROR_STORE_ERROR'}

    def test_cache_clear_and_stats(self, client, write_layouts, sample_layouts):
        write_layouts(sample_layouts)
        client.get('/api/layouts')

        stats = json.loads(client.get('/api/layouts/cache/stats').data)['data']
        assert 'layout_config' in stats['entries']

        response = client.post('/api/layouts/cache/clear')
        cleared = json.loads(response.data)['data']['cleared']

        assert response.status_code == 200
        assert cleared['layout_config'] is True
        assert cleared['classified_items'] is False
        stats = json.loads(client.get('/api/layouts/cache/stats').data)['data']
        assert stats['entries'] == {}


class TestHookEndpoints:
    """Tests for the record-store hook boundary"""

    def test_after_create(self, client, repository):
        response = client.post('/api/hooks/articles/after_create',
                               json={'data': make_article(77, highlight1_flag='Yes')})

        assert response.status_code == 200
        assert json.loads(response.data)['data']['article_id'] == 77
        assert repository.get_by_article_id(77)['highlight1_flag'] == 'Yes'

    def test_after_update_uses_original(self, client, repository):
        original = make_article(77, highlight1_flag='Yes')
        client.post('/api/hooks/articles/after_create', json={'data': original})

        response = client.post('/api/hooks/articles/after_update',
                               json={'data': {'article_id': 77, 'highlight1_flag': 'No'}, 'original': original})

        assert response.status_code == 200
        assert repository.get_by_article_id(77) is None

    def test_before_create_returns_modified_item(self, client, object_store):
        object_store.put('sys-menus-lov.json',
                         json.dumps([{'menu': 'News', 'sub_menu': 'Local', 'menu_id': 1, 'sub_menu_id': 11}]))

        response = client.post('/api/hooks/articles/before_create', json={'data': {'menu': 'News - Local'}})

        assert json.loads(response.data)['data'] == {'menu': 'News - Local', 'menu_id': 1, 'sub_menu_id': 11}

    def test_hook_failure_still_returns_item(self, client):
        with patch('hooks.article_hooks.parse_menu_value', side_effect=Exception('boom')):
            response = client.post('/api/hooks/articles/before_create', json={'data': {'menu': 'x'}})

        assert response.status_code == 200
        assert json.loads(response.data)['data'] == {'menu': 'x'}

    def test_unregistered_module_echoes_item(self, client):
        response = client.post('/api/hooks/authors/after_create', json={'data': {'id': 5}})

        assert response.status_code == 200
        assert json.loads(response.data)['data'] == {'id': 5}

    def test_unknown_event_is_rejected(self, client):
        response = client.post('/api/hooks/articles/after_publish', json={'data': {}})

        assert response.status_code == 400


class TestMetricsEndpoint:

    def test_metrics_exposed(self, client, classifier):
        classifier.classify(make_article(1, highlight1_flag='Yes'), 'create')

        response = client.get('/metrics')

        assert response.status_code == 200
        assert b'article_groups_classifications_total' in response.data
        assert b'article_groups_mirror_records_total 1.0' in response.data


class TestErrorHandlers:

    def test_unknown_route_returns_json(self, client):
        response = client.get('/api/does-not-exist')

        assert response.status_code == 404
        assert json.loads(response.data)['code'] == 'NOT_FOUND'
