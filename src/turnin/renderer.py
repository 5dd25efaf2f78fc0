from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .errors import RenderError
from .normalizer import CanonicalRecord
from .template import render_html

logger = logging.getLogger(__name__)

CHROME_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--font-render-hinting=none",
)


@dataclass(frozen=True)
class PdfOptions:
    format: str = "A4"
    margin: dict[str, str] = field(
        default_factory=lambda: {
            "top": "0.5cm",
            "right": "0.5cm",
            "bottom": "0.5cm",
            "left": "0.5cm",
        }
    )
    print_background: bool = True
    render_delay_ms: int = 1000


class DocumentRenderer(Protocol):
    async def render(self, record: CanonicalRecord) -> bytes: ...


async def html_to_pdf(html: str, options: PdfOptions | None = None) -> bytes:
    """Print ``html`` to PDF in a headless Chromium owned by this call."""

    opts = options or PdfOptions()
    start = time.monotonic()
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, args=list(CHROME_ARGS))
        try:
            page = await browser.new_page()
            await page.set_content(html, wait_until="networkidle")
            if opts.render_delay_ms:
                await page.wait_for_timeout(opts.render_delay_ms)
            pdf = await page.pdf(
                format=opts.format,
                margin=opts.margin,
                print_background=opts.print_background,
                prefer_css_page_size=False,
            )
        finally:
            await browser.close()
    logger.info("PDF rendered in %.2fs (%d bytes)", time.monotonic() - start, len(pdf))
    return pdf


class PlaywrightRenderer:
    def __init__(self, *, timeout_seconds: float = 60.0, options: PdfOptions | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        self.options = options or PdfOptions()

    async def render(self, record: CanonicalRecord) -> bytes:
        html = render_html(record)
        try:
            return await asyncio.wait_for(
                html_to_pdf(html, self.options), timeout=self.timeout_seconds
            )
        except TimeoutError as exc:
            raise RenderError(
                f"PDF rendering did not finish within {self.timeout_seconds:g}s"
            ) from exc
        except PlaywrightError as exc:
            raise RenderError(f"PDF rendering failed: {exc}") from exc
