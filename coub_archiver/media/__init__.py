"""
Media Layer.

This package is responsible for fetching media assets over HTTP and writing
them to disk.
"""

from .downloader import AssetFetcher, create_session

__all__ = ["AssetFetcher", "create_session"]
