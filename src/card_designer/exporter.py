"""PNG export of generated cards via a headless browser (Playwright)."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import EXPORT_FAILED_MESSAGE, ExportError
from .schema import CARD_HEIGHT, CARD_WIDTH

logger = logging.getLogger(__name__)

PIXEL_RATIO = 2
# Fixed wait for fonts and images inside the card to load before capture
SETTLE_DELAY_MS = 500


async def export_card_png(
    html_content: str,
    output_path: Path,
    *,
    width: int = CARD_WIDTH,
    height: int = CARD_HEIGHT,
    pixel_ratio: int = PIXEL_RATIO,
    settle_delay_ms: int = SETTLE_DELAY_MS,
) -> Path:
    """Render card HTML into a PNG of width x height at pixel_ratio density."""

    try:
        from playwright.async_api import Error as PlaywrightError, async_playwright
    except ImportError as exc:
        raise ExportError(
            "Playwright is not installed. Install it via `pip install playwright` "
            "and run `playwright install chromium`."
        ) from exc

    output_path = Path(output_path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        async with async_playwright() as p:
            browser = await p.chromium.launch()
            try:
                page = await browser.new_page(
                    viewport={"width": width, "height": height},
                    device_scale_factor=pixel_ratio,
                )
                await page.set_content(html_content)
                await page.wait_for_timeout(settle_delay_ms)
                await page.screenshot(
                    path=str(output_path),
                    clip={"x": 0, "y": 0, "width": width, "height": height},
                )
            finally:
                await browser.close()
    except (PlaywrightError, OSError) as exc:
        logger.error("Playwright PNG export failed: %s", exc)
        raise ExportError(EXPORT_FAILED_MESSAGE) from exc

    logger.info("Exported card to %s (%dx%d @%dx)", output_path, width, height, pixel_ratio)
    return output_path
