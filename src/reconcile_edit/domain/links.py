"""Index keys for external links.

URL values are only accepted when they have a key, and the record store indexes them
under it.

The key reverses the host name (``https://www.Example.org/a`` becomes
``https://org.example.www./a``) so that lookups are case-insensitive on the host and
a whole domain can be scanned with a prefix. Everything after the host is kept
verbatim; callers still compare the stored URL exactly.
"""

from __future__ import annotations

import ipaddress
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from reconcile_edit.domain.model import StringValue, value_snaks

if TYPE_CHECKING:
    from reconcile_edit.domain.model import Item

INDEXED_SCHEMES = frozenset({"http", "https", "ftp", "ftps", "irc", "ircs", "mailto", "news"})


def _reverse_host(host: str) -> str:
    host = host.lower().rstrip(".")
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return ".".join(reversed(host.split("."))) + "."
    return host


def make_link_index(url: str) -> str | None:
    """Return the index key for ``url``, or ``None`` if it is not an indexable link."""

    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in INDEXED_SCHEMES:
        return None

    if scheme == "mailto":
        mailbox, at, domain = parts.path.rpartition("@")
        if not at or not mailbox or not domain:
            return None
        return f"mailto:{_reverse_host(domain)}@{mailbox}"

    if not parts.hostname:
        return None
    key = f"{scheme}://{_reverse_host(parts.hostname)}"
    if port is not None:
        key += f":{port}"
    key += parts.path or "/"
    if parts.query:
        key += f"?{parts.query}"
    return key


def record_links(record: Item) -> list[str]:
    """URLs a record links to: every indexable string value, in statement order."""

    links: list[str] = []
    for snak in value_snaks(record.statements):
        if not isinstance(snak.value, StringValue):
            continue
        if make_link_index(snak.value.value) is not None and snak.value.value not in links:
            links.append(snak.value.value)
    return links
