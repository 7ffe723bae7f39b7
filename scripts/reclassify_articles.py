#!/usr/bin/env python3
"""
Re-run article classification over an exported article list, then render once.

Usage:
  scripts/reclassify_articles.py EXPORT.json [--no-render] [--dry-run]

EXPORT.json is a JSON array of article records (or {"data": [...]}) as the
articles record store exports them. Each record is classified as an update, so
the articles_groups mirror ends up exactly as if every article had been saved
again. Run this from the project root so the Flask app can be imported.
"""

import sys
import json
import argparse
import os

# Ensure app/ is on sys.path so its modules import as top-level names
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
APP_DIR = os.path.join(ROOT, "app")
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

try:
    from app import create_app
    from environment import get_pipeline_env
    from services.classification_service import ClassificationService
    from services.layout_render_service import LayoutRenderService
except Exception:
    print("Failed to import application modules. Run this script from the project root.")
    raise


def load_export(path):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("data") or []
    return [record for record in data if isinstance(record, dict)]


def main(export_path: str, render: bool, dry_run: bool):
    articles = load_export(export_path)
    total = len(articles)
    print(f"Found {total} articles in {export_path}")

    app = create_app()
    with app.app_context():
        env = get_pipeline_env()
        service = ClassificationService(env)
        placed = 0

        for idx, article in enumerate(articles, start=1):
            article_id = article.get("article_id")
            if dry_run:
                flags = service.resolve_flags(article) if article_id else None
            else:
                flags = service.classify(article, "update")
            members = sorted(name for name, value in (flags or {}).items() if value == "Yes")
            if members:
                placed += 1
            print(f"[{idx}/{total}] article {article_id}: {', '.join(members) or 'no groups'}")

        print(f"{placed}/{total} articles belong to at least one group")

        if render and not dry_run:
            env.clear_caches()
            report = LayoutRenderService(env).render_report()
            env.publisher.wait_for_pending()
            print(
                f"Rendered {report.layouts_processed} layouts, wrote {report.files_written} files "
                f"in {report.total_time_ms}ms"
            )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reclassify exported articles into highlight/ArticleGroup slots")
    parser.add_argument("export", help="JSON export of the articles record store")
    parser.add_argument("--no-render", action="store_true", help="Skip the layout render after classification")
    parser.add_argument("--dry-run", action="store_true", help="Resolve flags without writing the mirror table")
    args = parser.parse_args()
    main(args.export, render=not args.no_render, dry_run=args.dry_run)
