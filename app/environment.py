"""
Pipeline environment: the collaborators every hook and service shares within one process
"""

import logging

from artifact_publisher import ArtifactPublisher
from cache_service import TTLCache, clear_pipeline_caches
from item_cache import ItemCache
from layout_registry import LayoutRegistry
from object_store import LocalObjectStore
from settings import merge_settings
from utils import now_ms

logger = logging.getLogger("main")

_pipeline_env = None


class PipelineEnvironment:
    def __init__(self, object_store, settings=None, cache=None, clock=now_ms):
        self.settings = merge_settings(settings)
        self.object_store = object_store
        self.cache = cache or TTLCache()
        self.clock = clock

        layouts = self.settings["layouts"]
        ttls = self.settings["cache"]
        self.layout_registry = LayoutRegistry(
            object_store, self.cache, source_key=layouts["source_key"], ttl=ttls["layout_ttl"]
        )
        self.item_cache = ItemCache(self.cache, ttl=ttls["items_ttl"])
        self.publisher = ArtifactPublisher(object_store)

    @property
    def table_ttl(self):
        return self.settings["cache"]["table_ttl"]

    @property
    def layout_settings(self):
        return self.settings["layouts"]

    def clear_caches(self):
        """Cache-busting admin operation"""
        return clear_pipeline_caches(self.cache)

    @classmethod
    def from_settings(cls, settings):
        merged = merge_settings(settings)
        store = LocalObjectStore(merged["storage"]["object_store_dir"])
        return cls(store, settings=merged)


def get_pipeline_env():
    """Return the process-wide environment, building it from the settings file on first use"""
    global _pipeline_env
    if _pipeline_env is None:
        from settings import load_settings

        _pipeline_env = PipelineEnvironment.from_settings(load_settings())
        logger.info("Pipeline environment initialized")
    return _pipeline_env


def set_pipeline_env(env):
    global _pipeline_env
    _pipeline_env = env
    return env
