"""
grezzi: tolerance clustering of raw-piece dimensions.

Groups measured units (width x height) by identifier and partitions each
group into clusters of dimensionally compatible units.
"""

__version__ = "0.3.0"
