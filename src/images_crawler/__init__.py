"""Crawl image directory trees into object storage with tagged metadata."""

__version__ = "0.1.0"
