# template_tracker/links.py
from __future__ import annotations

"""
Template links.

Templates are shared as viewer URLs whose fragment carries the parameters:
  https://canvas.example/#template=<image url>&tw=<logical width>&ox=<x>&oy=<y>&title=<name>
"""

from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import unquote

from .core_types import Placement


@dataclass(frozen=True)
class TemplateLink:
    source: str
    logical_width: Optional[int]
    placement: Placement
    title: Optional[str]


def fragment_params(url: str) -> Dict[str, str]:
    """Decode `key=value` pairs from the URL fragment."""
    if "#" not in url:
        raise ValueError("template link has no fragment parameters")
    params: Dict[str, str] = {}
    for part in url.split("#", 1)[1].split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        params[key] = unquote(value)
    return params


def _int_param(params: Dict[str, str], key: str) -> Optional[int]:
    value = params.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(
            f"template link parameter {key!r} is not an integer: {value!r}"
        ) from None


def parse_template_link(url: str) -> TemplateLink:
    params = fragment_params(url)
    source = params.get("template")
    if not source:
        raise ValueError("missing template source")
    return TemplateLink(
        source=source,
        logical_width=_int_param(params, "tw"),
        placement=Placement(_int_param(params, "ox") or 0, _int_param(params, "oy") or 0),
        title=params.get("title") or None,
    )


__all__ = ["TemplateLink", "fragment_params", "parse_template_link"]
