"""docnum — collision-safe document and entity numbering."""

__version__ = "0.3.0"
