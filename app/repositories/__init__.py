"""
Repositories package
Database queries kept apart from models and services

- articles_groups_repository.py

Usage:
    from repositories.articles_groups_repository import ArticlesGroupsRepository
    record = ArticlesGroupsRepository.get_by_article_id(123)
"""
