"""
grezzi/ingest: Reading measurement exports into identifier groups.
"""

from .csv_reader import parse_column_list, read_groups

__all__ = [
    "parse_column_list",
    "read_groups",
]
