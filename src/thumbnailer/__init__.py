"""Batch generator for sequentially numbered thumbnail images."""

__version__ = "0.1.0"
