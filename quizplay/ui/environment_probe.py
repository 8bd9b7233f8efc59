"""Collects the environment snapshot from inside the question web page."""

from __future__ import annotations

import json
import logging
from typing import Any

from quizplay.core.models import EnvironmentSnapshot

logger = logging.getLogger(__name__)

PROBE_SCRIPT = """
(function () {
  const attributes = new Set();
  document.querySelectorAll('*').forEach(function (element) {
    for (const attribute of element.attributes) {
      if (attribute.name.startsWith('data-')) {
        attributes.add(attribute.name);
      }
    }
  });
  const chromeRuntime = !!(window.chrome && window.chrome.runtime && window.chrome.runtime.id);
  const browserRuntime = typeof window.browser !== 'undefined' && !!window.browser.runtime;
  return JSON.stringify({
    resourceUrls: performance.getEntriesByType('resource').map(function (entry) { return entry.name; }),
    scriptUrls: Array.from(document.scripts).map(function (script) { return script.src; }).filter(Boolean),
    domAttributes: Array.from(attributes),
    hasExtensionRuntime: chromeRuntime || browserRuntime,
    outerWidth: window.outerWidth,
    innerWidth: window.innerWidth,
    outerHeight: window.outerHeight,
    innerHeight: window.innerHeight
  });
})();
"""


def snapshot_from_probe(raw: Any) -> EnvironmentSnapshot:
    """Build a snapshot from the probe's JSON result; unusable input gives an empty one."""
    data = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Environment probe returned invalid JSON")
            return EnvironmentSnapshot()
    if not isinstance(data, dict):
        return EnvironmentSnapshot()

    def strings(key: str) -> list[str]:
        values = data.get(key) or []
        return [str(value) for value in values if value]

    def number(key: str) -> int:
        try:
            return int(data.get(key) or 0)
        except (TypeError, ValueError):
            return 0

    return EnvironmentSnapshot(
        resource_urls=strings("resourceUrls"),
        script_urls=strings("scriptUrls"),
        dom_attributes=strings("domAttributes"),
        has_extension_runtime=bool(data.get("hasExtensionRuntime")),
        outer_width=number("outerWidth"),
        inner_width=number("innerWidth"),
        outer_height=number("outerHeight"),
        inner_height=number("innerHeight"),
    )
