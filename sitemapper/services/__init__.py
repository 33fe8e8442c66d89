"""Sitemap services.

Structure:
- serializer.py: sitemaps.org XML rendering (pure)
- locale_builder.py: locale resolution and localized URL building
- registry.py: thread-safe in-memory registry with cached documents
- producer.py: (path, metadata) -> entries translation shared by producers
- discovery.py: FastAPI route scanner and endpoint decorators
- import_service.py: CSV producer
- context.py: per-application lifecycle object
"""
