"""
reporting/escaping.py - Escaping per target grammar.

None of these raise; non-string input is stringified first.
"""

from typing import Any, Iterable

_XML_ENTITIES = [
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
]


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def escape_csv(value: Any) -> str:
    """Quote a field iff it contains a comma, quote or newline; inner quotes doubled."""
    text = _to_text(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def csv_row(values: Iterable[Any]) -> str:
    return ",".join(escape_csv(v) for v in values)


def escape_xml(value: Any) -> str:
    """
    Replace & < > " ' with named entities.

    Ampersands go first so each character is substituted exactly once.
    Safe for element text and quoted attribute values in both XML and HTML.
    """
    text = _to_text(value)
    for char, entity in _XML_ENTITIES:
        text = text.replace(char, entity)
    return text


def escape_markdown_cell(value: Any) -> str:
    """Table-cell text: pipes escaped, line breaks flattened."""
    text = _to_text(value)
    return text.replace("|", "\\|").replace("\r\n", " ").replace("\n", " ")
