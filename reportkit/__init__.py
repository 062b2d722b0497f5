"""
reportkit - Multi-format report exporter.

Turns a report (template plus computed data points) into CSV, SpreadsheetML,
printable HTML/PDF, Markdown, JSON or PNG artifacts.
"""

__version__ = "1.0.0"
