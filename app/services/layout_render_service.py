"""
Layout Render Service
Renders every active layout from the cached articles and publishes the results
"""

import re
import time
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from artifact_publisher import content_type_for, file_extension
from constants import SCRIPT_EXTENSIONS
from metrics import layouts_rendered_total, render_duration_seconds
from template_engine import parse_sort_spec, render_template, sort_items

logger = logging.getLogger("main")


class RenderStatus:
    ADDED = "added"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class RenderResult:
    """Outcome of one layout in a render pass"""

    layout_name: str
    status: str
    file: Optional[str] = None
    function: Optional[str] = None
    filtered_by: str = "none"
    item_count: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        result = {
            "layout_name": self.layout_name,
            "function": self.function,
            "file": self.file,
            "filtered_by": self.filtered_by,
            "article_count": self.item_count,
            "status": self.status,
        }
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class RenderReport:
    results: List[RenderResult] = field(default_factory=list)
    total_time_ms: int = 0
    layouts_processed: int = 0
    files_written: int = 0
    articles_cached: int = 0

    def to_dict(self) -> Dict:
        return {
            "status": "success",
            "message": f"Layout files created in {self.total_time_ms}ms",
            "details": [result.to_dict() for result in self.results],
            "performance": {
                "total_time_ms": self.total_time_ms,
                "layouts_processed": self.layouts_processed,
                "files_written": self.files_written,
                "articles_cached": self.articles_cached,
            },
        }


def script_function_name(layout_name: str) -> str:
    return "Get" + re.sub(r"\s+", "", layout_name)


def wrap_as_script(function_name: str, html: str) -> str:
    """Wrap rendered markup as a callable that document.write()s it"""
    escaped = html.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
    return f"function {function_name}(){{document.write(`{escaped}`);}}\n\n"


class LayoutRenderService:
    def __init__(self, env):
        self.env = env

    def render_all(self) -> List[RenderResult]:
        """Render every active layout; see render_report() for timings and counts"""
        return self.render_report().results

    def render_report(self) -> RenderReport:
        """
        Render and publish all active layouts

        Raises:
            MirrorStoreException: the article scan failed (nothing is rendered)
        """
        start = time.time()
        layouts = self.env.layout_registry.get_active_layouts().all_active
        items = self.env.item_cache.get_classified_items()

        report = RenderReport(layouts_processed=len(layouts), articles_cached=len(items.all))
        combined_file = self.env.layout_settings["combined_file"]
        combined_script = []
        artifacts = []

        for layout in layouts:
            result, artifact = self.render_layout(layout, items)
            report.results.append(result)
            layouts_rendered_total.labels(status=result.status).inc()
            if artifact is None:
                continue
            key, content = artifact
            if file_extension(key) in SCRIPT_EXTENSIONS:
                combined_script.append(content)
            # Layouts targeting the combined file only contribute to it
            if key != combined_file:
                artifacts.append((key, content, content_type_for(key)))

        if combined_script:
            self.env.publisher.publish_sync(combined_file, "".join(combined_script), content_type_for(combined_file))
            report.files_written += 1
        report.files_written += self.env.publisher.publish_all_async(artifacts)

        report.total_time_ms = int((time.time() - start) * 1000)
        render_duration_seconds.observe(time.time() - start)
        logger.info(
            f"RESULT: {len(layouts)} layouts, {len(artifacts)} files, {report.total_time_ms}ms total "
            f"(1 sync + {len(artifacts)} async)"
        )
        return report

    def select_items(self, layout, items):
        """(articles, flag filter) for a layout: highlight layouts read their flag group"""
        flag_name = layout.highlight_flag
        if flag_name:
            return items.by_flag.get(flag_name, []), flag_name
        return items.all, None

    def render_layout(self, layout, items):
        """
        Returns:
            (RenderResult, (key, content) or None)
        """
        reserved_prefix = self.env.layout_settings["reserved_prefix"]
        if layout.is_reserved(reserved_prefix):
            return RenderResult(layout.layout_name, RenderStatus.SKIPPED, filtered_by=f"skipped ({reserved_prefix}*)"), None
        if not layout.layout_body:
            return RenderResult(layout.layout_name, RenderStatus.SKIPPED, filtered_by="skipped (no body)"), None

        try:
            subset, flag_name = self.select_items(layout, items)
            sort_spec = parse_sort_spec(layout.layout_order)
            if sort_spec:
                subset = sort_items(subset, sort_spec)
            rendered = render_template(layout, subset)
        except Exception as e:
            logger.error(f"Error rendering layout {layout.layout_name}: {e}")
            return RenderResult(layout.layout_name, RenderStatus.ERROR, file=layout.layout_file, error=str(e)), None

        key = layout.layout_file
        function_name = None
        content = rendered.html
        if file_extension(key) in SCRIPT_EXTENSIONS:
            function_name = script_function_name(layout.layout_name)
            content = wrap_as_script(function_name, rendered.html)

        result = RenderResult(
            layout.layout_name,
            RenderStatus.ADDED,
            file=key,
            function=function_name,
            filtered_by="yes" if flag_name else "none",
            item_count=rendered.rendered_count,
        )
        return result, (key, content)
