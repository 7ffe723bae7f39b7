"""
Models package

- articles_groups.py: the mirror table read by counting and rendering
"""

from .articles_groups import ArticlesGroups

__all__ = [
    "ArticlesGroups",
]
