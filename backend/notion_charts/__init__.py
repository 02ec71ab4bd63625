# backend/notion_charts/__init__.py
"""
Notion Charts backend application package.

This package contains:
- main: FastAPI application entrypoint
- notion: Notion integration (client, property extraction, routes)
- charts: chart data transformation pipeline and contribution calendar
- storage: saved chart configurations
"""
