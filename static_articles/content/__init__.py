"""
Content tree resolution: walking, entity building, caching and artifacts.
"""

from .builders import build_article_from_folder, build_collection_from_folder, reading_time
from .routes import article_path, base_path, canonical_url, collection_path, site_url
from .store import ContentStore, DevImage, filter_drafts
from .tree import classify, is_content_bearing, load_all_from_disk, walk

__all__ = [
    "ContentStore",
    "DevImage",
    "article_path",
    "base_path",
    "build_article_from_folder",
    "build_collection_from_folder",
    "canonical_url",
    "classify",
    "collection_path",
    "filter_drafts",
    "is_content_bearing",
    "load_all_from_disk",
    "reading_time",
    "site_url",
    "walk",
]
