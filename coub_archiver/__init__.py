"""Archives a Coub user's clips, their metadata and media renditions."""

__version__ = "0.1.0"
