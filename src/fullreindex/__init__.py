"""Parallel full reindex of one Solr collection into another."""

__version__ = "0.1.0"
