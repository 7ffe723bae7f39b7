"""
Layout Registry
Loads sys-system-layouts.json, keeps the active layouts for one TTL window and
indexes them by name and style
"""

import logging
from typing import Dict, List, NamedTuple, Optional

from constants import (
    ARTICLEGROUP_LAYOUT_PREFIX,
    DEFAULT_LAYOUT_FILE,
    HIGHLIGHT_LAYOUT_PREFIX,
    LAYOUT_CACHE_KEY,
    LAYOUT_CACHE_TTL,
    LAYOUTS_SOURCE_KEY,
    RESERVED_LAYOUT_PREFIX,
)
from exceptions import LayoutConfigException
from utils import to_number

logger = logging.getLogger("main")


class LayoutDefinition:
    """One entry of the layout source document"""

    def __init__(
        self,
        layout_name: str,
        layout_body: str = "",
        active: bool = True,
        layout_display_name: str = "",
        layout_order: str = "",
        layout_limit: int = 0,
        layout_file: str = DEFAULT_LAYOUT_FILE,
        layout_css: str = "",
        layout_js: str = "",
        where_clause: Optional[str] = None,
    ):
        self.layout_name = layout_name
        self.layout_body = layout_body or ""
        self.active = active
        self.layout_display_name = layout_display_name or ""
        self.layout_order = layout_order or ""
        self.layout_limit = layout_limit or 0
        self.layout_file = layout_file or DEFAULT_LAYOUT_FILE
        self.layout_css = layout_css or ""
        self.layout_js = layout_js or ""
        self.where_clause = where_clause

    @staticmethod
    def parse_active(value) -> bool:
        if isinstance(value, bool):
            return value
        return isinstance(value, str) and value.strip().lower() == "yes"

    @classmethod
    def from_dict(cls, data: Dict) -> "LayoutDefinition":
        if not isinstance(data, dict) or not data.get("layout_name"):
            raise LayoutConfigException(f"Layout entry without layout_name: {data!r}")
        limit = to_number(data.get("layout_limit"))
        return cls(
            layout_name=str(data["layout_name"]),
            layout_body=data.get("layout_body") or "",
            active=cls.parse_active(data.get("active")),
            layout_display_name=data.get("layout_display_name") or "",
            layout_order=data.get("layout_order") or "",
            layout_limit=int(limit) if limit and limit > 0 else 0,
            layout_file=data.get("layout_file") or DEFAULT_LAYOUT_FILE,
            layout_css=data.get("layout_css") or "",
            layout_js=data.get("layout_js") or "",
            where_clause=data.get("where_clause"),
        )

    def to_dict(self) -> Dict:
        return {
            "layout_name": self.layout_name,
            "layout_display_name": self.layout_display_name,
            "active": "Yes" if self.active else "No",
            "layout_order": self.layout_order,
            "layout_limit": self.layout_limit,
            "layout_file": self.layout_file,
            "style": self.style,
            "where_clause": self.where_clause,
        }

    @property
    def is_highlight(self) -> bool:
        return self.layout_name.lower().startswith(HIGHLIGHT_LAYOUT_PREFIX.lower())

    @property
    def is_article_group(self) -> bool:
        return self.layout_name.startswith(ARTICLEGROUP_LAYOUT_PREFIX)

    def is_reserved(self, prefix: str = RESERVED_LAYOUT_PREFIX) -> bool:
        return self.layout_name.lower().startswith(prefix.lower())

    @property
    def highlight_flag(self) -> Optional[str]:
        """Flag column a highlight layout renders from, e.g. Highlight3 -> highlight3_flag"""
        return f"{self.layout_name.lower()}_flag" if self.is_highlight else None

    @property
    def style(self) -> str:
        if self.is_highlight:
            return "highlight"
        if self.is_article_group:
            return "articlegroup"
        return "general"

    def __repr__(self):
        return f"<LayoutDefinition {self.layout_name} limit={self.layout_limit} file={self.layout_file}>"


class LayoutConfig(NamedTuple):
    all_active: List[LayoutDefinition]
    article_groups: List[LayoutDefinition]
    by_name: Dict[str, LayoutDefinition]


EMPTY_LAYOUT_CONFIG = LayoutConfig(all_active=[], article_groups=[], by_name={})


def build_layout_config(raw_layouts) -> LayoutConfig:
    """Filter a parsed layout document down to active layouts and index them"""
    if not isinstance(raw_layouts, list):
        raise LayoutConfigException("Layout source must be a JSON array")

    all_active = []
    for entry in raw_layouts:
        try:
            layout = LayoutDefinition.from_dict(entry)
        except LayoutConfigException:
            continue
        if layout.active:
            all_active.append(layout)

    article_groups = [layout for layout in all_active if layout.is_article_group]
    return LayoutConfig(
        all_active=all_active,
        article_groups=article_groups,
        by_name={layout.layout_name: layout for layout in all_active},
    )


class LayoutRegistry:
    def __init__(self, object_store, cache, source_key=LAYOUTS_SOURCE_KEY, ttl=LAYOUT_CACHE_TTL):
        self.object_store = object_store
        self.cache = cache
        self.source_key = source_key
        self.ttl = ttl

    def get_active_layouts(self) -> LayoutConfig:
        """
        Active layouts, ArticleGroup layouts and a name index

        A missing or unreadable source yields an empty config (not cached, so
        the next call retries the load).
        """
        cached = self.cache.get(LAYOUT_CACHE_KEY)
        if cached is not None:
            return cached

        try:
            raw_layouts = self.object_store.get_json(self.source_key)
            if raw_layouts is None:
                raise LayoutConfigException(f"{self.source_key} not found")
            config = build_layout_config(raw_layouts)
        except Exception as e:
            logger.warning(f"Could not load {self.source_key}: {e}")
            return EMPTY_LAYOUT_CONFIG

        self.cache.set(LAYOUT_CACHE_KEY, config, self.ttl)
        logger.info(
            f"Layout config cached: {len(config.article_groups)} ArticleGroups, {len(config.all_active)} total active"
        )
        return config
