"""Frontmatter codec - YAML header plus Markdown body."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml

from ticketmcp.tickets.schema import FRONTMATTER_KEYS

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_BOOL_TAG = "tag:yaml.org,2002:bool"


class _TicketLoader(yaml.SafeLoader):
    """SafeLoader that keeps timestamps as plain strings.

    Only true/false are booleans; yes, no, on and off stay strings.
    """


_TicketLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_TIMESTAMP_TAG, _BOOL_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_TicketLoader.add_implicit_resolver(
    _BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")
)


class _TicketDumper(yaml.SafeDumper):
    """SafeDumper that writes enum members as their string values."""


_TicketDumper.add_multi_representer(
    Enum, lambda dumper, value: dumper.represent_str(str(value.value))
)


@dataclass
class ParsedFrontmatter:
    """Result of decoding a ticket file."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    error: str | None = None


def decode(raw: str) -> ParsedFrontmatter:
    """Split raw file text into frontmatter, body and an optional parse error.

    Text without a delimited header is all body. A header that is not valid
    YAML (or not a mapping) yields empty frontmatter and an error message;
    such records must not be mutated.
    """
    match = _FRONTMATTER_RE.match(raw)
    if match is None:
        return ParsedFrontmatter(frontmatter={}, body=raw)

    body = raw[match.end() :].lstrip()
    try:
        data = yaml.load(match.group(1) or "", Loader=_TicketLoader)  # noqa: S506
    except yaml.YAMLError as e:
        return ParsedFrontmatter(body=body, error=f"YAML parse error: {_yaml_message(e)}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return ParsedFrontmatter(
            body=body,
            error=f"YAML parse error: frontmatter must be a mapping, got {type(data).__name__}",
        )
    return ParsedFrontmatter(frontmatter=data, body=body)


def split_header(raw: str) -> tuple[str, str] | None:
    """Split raw text into the verbatim header block and the rest, or None."""
    match = _FRONTMATTER_RE.match(raw)
    if match is None:
        return None
    return raw[: match.end()], raw[match.end() :]


def order_frontmatter(frontmatter: dict[str, Any]) -> dict[str, Any]:
    """Return a copy with canonical keys first, extra keys after in insertion order."""
    ordered = {key: frontmatter[key] for key in FRONTMATTER_KEYS if key in frontmatter}
    for key, value in frontmatter.items():
        if key not in ordered:
            ordered[key] = value
    return ordered


def encode(frontmatter: dict[str, Any], body: str) -> str:
    """Serialize frontmatter and body into ticket file text."""
    dumped = yaml.dump(
        order_frontmatter(frontmatter),
        Dumper=_TicketDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=4096,
    ).rstrip()
    if dumped == "{}":
        dumped = ""
    return f"---\n{dumped}\n---\n\n{body.lstrip()}"


def _yaml_message(error: yaml.YAMLError) -> str:
    """Compact single-line message for a YAML error."""
    return " ".join(str(error).split()) or "unknown"
