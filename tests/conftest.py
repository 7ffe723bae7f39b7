"""
Pytest fixtures and configuration for article groups tests
"""
import json
import os
import sys
import pytest

# Add app directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'app'))

FIXED_NOW_MS = 1767225600000


class FakeClock:
    """Manually advanced clock for TTL expiry"""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_layout(name, **fields):
    layout = {
        'layout_name': name,
        'active': 'Yes',
        'layout_display_name': name,
        'layout_body': '{{RepeatBegin}}<h2>{{heading}}</h2>{{RepeatEnd}}',
        'layout_order': '',
        'layout_limit': 0,
        'layout_file': f'{name.lower()}.html',
    }
    layout.update(fields)
    return layout


def make_article(article_id, **fields):
    article = {
        'article_id': article_id,
        'heading': f'Article {article_id}',
        'body': f'Body of article {article_id}',
        'issue_date': 1767000000000 + article_id,
        'menu': 'News - Local',
        'sub_menu_id': 7,
        'active': 'Yes',
    }
    article.update(fields)
    return article


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def object_store(tmp_path):
    from object_store import LocalObjectStore

    return LocalObjectStore(str(tmp_path / 'objects'))


@pytest.fixture
def sample_layouts():
    """Layout source document covering every layout style"""
    return [
        make_layout('Highlight1', layout_file='highlight1.js', layout_order='issue_date DESC'),
        make_layout('Highlight3', layout_limit=2, layout_file='highlight3.js'),
        make_layout('ArticleGroup1', where_clause="menu = 'Sports - Football'", layout_file='sports.html'),
        make_layout('ArticleGroup2', where_clause='1=1', layout_limit=2, layout_file='latest.xml'),
        make_layout('ArticleGroup3', where_clause='sub_menu_id = 9', active='No'),
        make_layout('MenuTop', layout_body='<ul>{{menu}}</ul>', layout_file='menu.js'),
    ]


@pytest.fixture
def write_layouts(object_store):
    """Write a layout source document into the object store"""

    def _write(layouts):
        object_store.put('sys-system-layouts.json', json.dumps(layouts), 'application/json')
        return layouts

    return _write


@pytest.fixture
def env(object_store, fake_clock):
    from cache_service import TTLCache
    from environment import PipelineEnvironment

    return PipelineEnvironment(
        object_store,
        settings={'render': {'after_classification': False}},
        cache=TTLCache(clock=fake_clock),
        clock=lambda: FIXED_NOW_MS,
    )


@pytest.fixture
def app(tmp_path, env):
    """Flask app on an in-memory SQLite database with the test pipeline environment"""
    from app import create_app
    from db import db

    flask_app = create_app(
        settings={
            'database': {'uri': 'sqlite://'},
            'storage': {'object_store_dir': str(tmp_path / 'objects')},
        },
        env=env,
    )
    flask_app.config['TESTING'] = True

    with flask_app.app_context():
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def repository(app):
    from repositories.articles_groups_repository import ArticlesGroupsRepository

    return ArticlesGroupsRepository


@pytest.fixture
def classifier(app, env):
    from services.classification_service import ClassificationService

    return ClassificationService(env)
