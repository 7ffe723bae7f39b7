"""
Record-store hooks for the articles module
Keeps the articles_groups mirror and the rendered layout files in step with
article create/update/delete. Every hook returns the record it was given and
never raises, so the article operation itself always completes.
"""

import logging

from environment import get_pipeline_env
from services.classification_service import ClassificationService
from services.layout_render_service import LayoutRenderService

logger = logging.getLogger("main")


def before_create(data, env=None):
    try:
        parse_menu_value(data, env or get_pipeline_env())
    except Exception as e:
        logger.error(f"ArticleHooks before_create failed: {e}", exc_info=True)
    return data


def after_create(data, env=None):
    logger.info(f"ArticleHooks after_create called for article: {data.get('article_id')}")
    try:
        env = env or get_pipeline_env()
        ClassificationService(env).classify(data, "create")
        _render_layouts(env)
    except Exception as e:
        logger.error(f"ArticleHooks after_create failed: {e}", exc_info=True)
    return data


def before_update(updates, original, env=None):
    try:
        parse_menu_value(updates, env or get_pipeline_env())
    except Exception as e:
        logger.error(f"ArticleHooks before_update failed: {e}", exc_info=True)
    return updates


def after_update(updated, original, env=None):
    logger.info(f"ArticleHooks after_update called for article: {updated.get('article_id')}")
    try:
        env = env or get_pipeline_env()
        # Partial updates are classified against the full record
        merged = {**(original or {}), **updated}
        ClassificationService(env).classify(merged, "update")
        _render_layouts(env)
    except Exception as e:
        logger.error(f"ArticleHooks after_update failed: {e}", exc_info=True)
    return updated


def before_delete(data, env=None):
    return data


def after_delete(data, env=None):
    logger.info(f"ArticleHooks after_delete called for article: {data.get('article_id')}")
    try:
        env = env or get_pipeline_env()
        ClassificationService(env).classify(data, "delete")
    except Exception as e:
        logger.error(f"ArticleHooks after_delete failed: {e}", exc_info=True)
    return data


def _render_layouts(env):
    if not (env.settings.get("render") or {}).get("after_classification", True):
        return None
    try:
        return LayoutRenderService(env).render_report()
    except Exception as e:
        logger.error(f"Error rendering layouts after article change: {e}", exc_info=True)
        return None


def parse_menu_value(data, env):
    """
    Resolve a "<menu> - <sub_menu>" value to menu_id/sub_menu_id using the menus LOV document

    The concatenated value stays in data["menu"] for display.
    """
    menu_value = data.get("menu")
    if not menu_value or not isinstance(menu_value, str):
        return data

    menu_value = menu_value.strip()
    if " - " not in menu_value:
        logger.debug("Menu value is not in concatenated format, skipping parsing")
        return data

    lov_key = env.layout_settings["menus_lov_key"]
    try:
        lov_data = env.object_store.get_json(lov_key)
        if lov_data is None:
            logger.warning(f"{lov_key} not found, cannot parse menu value")
            return data

        for record in lov_data:
            if f"{record.get('menu') or ''} - {record.get('sub_menu') or ''}" == menu_value:
                data["menu_id"] = record.get("menu_id")
                data["sub_menu_id"] = record.get("sub_menu_id")
                logger.debug(f"Updated menu_id: {data['menu_id']}, sub_menu_id: {data['sub_menu_id']}")
                return data

        logger.warning(f"No matching LOV record found for menu value: {menu_value!r}")
    except Exception as e:
        logger.error(f"Error parsing menu value: {e}")
    return data
