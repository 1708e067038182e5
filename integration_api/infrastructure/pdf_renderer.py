"""Headless Chromium PDF rendering through Playwright."""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from integration_api.application.pdf_options import PdfOptions
from integration_api.domain.errors import PdfGenerationError

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
INCOGNITO_VIEWPORT = {"width": 1920, "height": 1080}

# Scrolls to the bottom in 100px steps so lazily loaded images are fetched
AUTO_SCROLL_SCRIPT = """
async () => {
    await new Promise((resolve) => {
        let totalHeight = 0;
        const distance = 100;
        const timer = setInterval(() => {
            const scrollHeight = document.body.scrollHeight;
            window.scrollBy(0, distance);
            totalHeight += distance;
            if (totalHeight >= scrollHeight - window.innerHeight) {
                clearInterval(timer);
                resolve();
            }
        }, 100);
    });
}
"""

_PIXELS = re.compile(r"^(\d+)(px)?$")


def _pixels(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    match = _PIXELS.match(value.strip())
    return int(match.group(1)) if match else None


class PlaywrightPdfRenderer:
    """Renders a URL to PDF bytes in a fresh browser per call."""

    def __init__(self, executable_path: str = "", timeout_seconds: float = 60.0) -> None:
        self._executable_path = executable_path or None
        self._timeout_ms = timeout_seconds * 1000

    def _context_options(self, options: PdfOptions) -> Dict[str, Any]:
        context_options: Dict[str, Any] = {"ignore_https_errors": True}
        width, height = _pixels(options.width), _pixels(options.height)
        # Without a paper format the page is laid out at the requested pixel size
        if not options.page_format and width and height:
            context_options["viewport"] = {"width": width, "height": height}
            context_options["device_scale_factor"] = options.scale
            context_options["is_mobile"] = options.mobile
        elif options.incognito:
            context_options["viewport"] = INCOGNITO_VIEWPORT
        return context_options

    async def render(self, options: PdfOptions) -> bytes:
        async with async_playwright() as playwright:
            try:
                browser = await playwright.chromium.launch(
                    headless=options.headless,
                    args=LAUNCH_ARGS,
                    executable_path=self._executable_path,
                )
            except PlaywrightError as exc:
                raise PdfGenerationError(f"Failed to launch browser: {exc}") from exc

            try:
                context = await browser.new_context(**self._context_options(options))
                page = await context.new_page()

                if options.emulate_media_type:
                    # "null" turns media emulation off
                    media = "null" if options.emulate_media_type == "blank" else options.emulate_media_type
                    await page.emulate_media(media=media)

                await page.goto(options.path, wait_until=options.wait_until, timeout=self._timeout_ms)
                if options.auto_scroll:
                    await page.evaluate(AUTO_SCROLL_SCRIPT)

                return await page.pdf(**options.pdf_arguments())
            except PlaywrightError as exc:
                raise PdfGenerationError(f"Failed to render {options.path}: {exc}") from exc
            finally:
                await browser.close()
