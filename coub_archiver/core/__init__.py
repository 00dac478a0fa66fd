"""
Core application engine for orchestrating the archive process.

This package contains the primary logic. The `CatalogProcessor` acts as the
high-level session coordinator, delegating each coub's downloads to the
`ClipDownloadCoordinator`, which in turn runs one downloader per asset group.
"""
