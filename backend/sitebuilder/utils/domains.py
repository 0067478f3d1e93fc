# sitebuilder/utils/domains.py
import re
from typing import Optional

_LABEL = r"(?!-)[a-z0-9-]{1,63}(?<!-)"
DOMAIN_PATTERN = re.compile(rf"^(?:{_LABEL}\.)+[a-z]{{2,63}}$")


def normalize_host(host: Optional[str]) -> str:
    """`Example.COM:8080.` -> `example.com`"""
    if not host:
        return ""
    host = host.strip().lower()
    if host.startswith("["):
        # IPv6 literal; keep as-is without the port
        return host.split("]", 1)[0] + "]"
    return host.split(":", 1)[0].rstrip(".")


def normalize_domain(value: str) -> str:
    """Strips the scheme, path and port users tend to paste along."""
    value = (value or "").strip().lower()
    value = re.sub(r"^[a-z][a-z0-9+.-]*://", "", value)
    value = value.split("/", 1)[0]
    return normalize_host(value)


def is_valid_domain(domain: str) -> bool:
    return len(domain) <= 253 and bool(DOMAIN_PATTERN.match(domain))
