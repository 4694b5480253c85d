"""
Field extraction from rendered article detail pages.

The detail page exposes the title, publish date and body in fixed regions,
plus an image gallery. BeautifulSoup CSS selectors pull each region's text
content from the HTML returned by the browser.
"""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup

from ..config import FetchConfig


class MissingElementError(ValueError):
    """Raised when a required region is not present in the page."""


@dataclass
class ExtractedFields:
    """Text fields and image URLs pulled from a detail page."""

    title: str | None
    date: str | None
    body: str | None
    images: list[str]


def required_selectors(cfg: FetchConfig) -> list[str]:
    return [cfg.title_selector, cfg.date_selector, cfg.body_selector]


def extract_fields(html: str, cfg: FetchConfig) -> ExtractedFields:
    """Extract title, date, body and gallery images from page HTML.

    Text is taken from the first element matching each selector, with
    leading/trailing whitespace stripped; an empty region becomes None.

    Args:
        html: Rendered page HTML
        cfg: Fetch configuration holding the selectors

    Returns:
        ExtractedFields for the page

    Raises:
        MissingElementError: If a title, date or body region is absent
    """
    soup = BeautifulSoup(html or "", "html.parser")

    for selector in required_selectors(cfg):
        if soup.select_one(selector) is None:
            raise MissingElementError(f"Element not found: {selector}")

    images = [
        img.get("src")
        for img in soup.select(cfg.image_selector)
        if img.get("src") is not None
    ]

    return ExtractedFields(
        title=_text_of(soup, cfg.title_selector),
        date=_text_of(soup, cfg.date_selector),
        body=_text_of(soup, cfg.body_selector),
        images=images,
    )


def _text_of(soup: BeautifulSoup, selector: str) -> str | None:
    node = soup.select_one(selector)
    if node is None:
        return None
    text = node.get_text().strip()
    return text or None
