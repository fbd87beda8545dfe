"""Batch publishing of shapefile datasets to GeoServer."""

__version__ = "0.1.0"
