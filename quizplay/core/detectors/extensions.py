"""One-shot scan for browser-extension and devtools artifacts."""

from __future__ import annotations

from quizplay.constants.integrity_constants import (
    AI_ASSISTANT_EXTENSION_PATTERNS,
    DEVTOOLS_SIZE_DELTA_PX,
    EXTENSION_DOM_MARKERS,
    EXTENSION_URL_SCHEMES,
    SCREENSHOT_EXTENSION_PATTERNS,
)
from quizplay.core.detectors.base import Detector, DetectorContext
from quizplay.core.models import EnvironmentSnapshot, IntegrityEventKind


def scan_environment(snapshot: EnvironmentSnapshot) -> list[str]:
    """Return human-readable findings, without duplicates, in discovery order."""
    findings: list[str] = []

    def add(finding: str) -> None:
        if finding not in findings:
            findings.append(finding)

    for url in [*snapshot.script_urls, *snapshot.resource_urls]:
        lowered = url.lower()
        scheme = next((s for s in EXTENSION_URL_SCHEMES if lowered.startswith(s)), None)
        if scheme is not None:
            extension_id = url[len(scheme):].split("/", 1)[0]
            add(f"Extension script loaded: {scheme}{extension_id}")
        for pattern in SCREENSHOT_EXTENSION_PATTERNS:
            if pattern in lowered:
                add(f"Screenshot extension detected: {pattern}")
        for pattern in AI_ASSISTANT_EXTENSION_PATTERNS:
            if pattern in lowered:
                add(f"AI assistant extension detected: {pattern}")

    for attribute in snapshot.dom_attributes:
        lowered = attribute.lower()
        if any(lowered.startswith(marker) for marker in EXTENSION_DOM_MARKERS):
            add(f"Extension DOM artifact: {attribute}")

    if snapshot.has_extension_runtime:
        add("Browser extension runtime is accessible from the page")

    if snapshot.inner_width > 0 and snapshot.inner_height > 0:
        width_delta = snapshot.outer_width - snapshot.inner_width
        height_delta = snapshot.outer_height - snapshot.inner_height
        if width_delta > DEVTOOLS_SIZE_DELTA_PX or height_delta > DEVTOOLS_SIZE_DELTA_PX:
            add(f"Developer tools may be open (window size delta {width_delta}x{height_delta} px)")

    return findings


class ExtensionScanner(Detector):
    """Scans the environment snapshot on the first start only."""

    name = "extensions"

    def __init__(self) -> None:
        super().__init__()
        self._scanned = False

    @property
    def scanned(self) -> bool:
        return self._scanned

    def _on_start(self, context: DetectorContext) -> None:
        if self._scanned or context.environment is None:
            return
        self._scanned = True
        for finding in scan_environment(context.environment):
            self._report(IntegrityEventKind.SUSPICIOUS_EXTENSION, finding)
