"""
Normalization subsystem for tabflow.

This package converts records into table rows and writes them out.  It
provides the HTML label/value harvester, the column matcher, the
newline and null policies, the per-record `RowBuilder` and the
delimited `TableWriter`.
"""

from .html_to_fields import clean_content, extract_html_values, harvest_labels  # noqa: F401
from .matcher import assign_labels, column_matches  # noqa: F401
from .row_builder import RowBuilder, extract_line_value  # noqa: F401
from .write_csv import TableWriter  # noqa: F401
