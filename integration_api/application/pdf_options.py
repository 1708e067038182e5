"""Validation and defaults for /generate-pdf rendering options."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

from integration_api.domain.errors import ValidationError

PAGE_FORMATS = ("Letter", "Legal", "Tabloid", "Ledger", "A0", "A1", "A2", "A3", "A4", "A5", "A6")
MEDIA_TYPES = ("print", "screen", "blank")

# Puppeteer-style waitUntil values mapped onto the renderer's load states
WAIT_UNTIL = {
    "load": "load",
    "domcontentloaded": "domcontentloaded",
    "networkidle0": "networkidle",
    "networkidle2": "networkidle",
    "networkidle": "networkidle",
}

CHROMIUM_PRODUCTS = ("chrome", "chromium")


@dataclass(frozen=True)
class PdfOptions:
    path: str
    record_id: str
    filename: str
    page_format: Optional[str] = "Letter"
    headless: bool = True
    incognito: bool = False
    emulate_media_type: Optional[str] = None
    wait_until: str = "networkidle"
    auto_scroll: bool = False
    fit_window: bool = False
    mobile: bool = False
    width: Optional[str] = None
    height: Optional[str] = None
    margin: Optional[Dict[str, str]] = None
    scale: float = 1.0
    prefer_css_page_size: bool = False
    display_header_footer: bool = False
    header_template: str = ""
    footer_template: str = ""
    print_background: bool = False
    landscape: bool = False
    page_ranges: str = ""

    def pdf_arguments(self) -> Dict[str, Any]:
        """Keyword arguments for the renderer's page.pdf() call."""
        args: Dict[str, Any] = {}
        if self.page_format:
            args["format"] = self.page_format
        if self.scale != 1:
            args["scale"] = self.scale
        if self.width:
            args["width"] = self.width
        if self.height:
            args["height"] = self.height
        if self.margin:
            args["margin"] = self.margin
        if self.display_header_footer:
            args["display_header_footer"] = True
            args["header_template"] = self.header_template
            args["footer_template"] = self.footer_template
        if self.print_background:
            args["print_background"] = True
        if self.landscape:
            args["landscape"] = True
        if self.page_ranges:
            args["page_ranges"] = self.page_ranges
        if self.prefer_css_page_size:
            args["prefer_css_page_size"] = True
        return args


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or value is False:
        return ""
    return str(value).strip()


def _margin(value: Any) -> Optional[Dict[str, str]]:
    if not value:
        return None
    if isinstance(value, dict):
        return {side: str(value[side]) for side in ("top", "right", "bottom", "left") if value.get(side)}
    return {side: str(value) for side in ("top", "right", "bottom", "left")}


def parse_pdf_options(data: Dict[str, Any]) -> PdfOptions:
    """Build PdfOptions from a request payload, raising ValidationError on bad input."""
    path = _text(data, "path")
    if not path:
        raise ValidationError("Missing path parameter. REQUIRED")
    parts = urlsplit(path)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValidationError(f"path must be an absolute http(s) URL: {path}")

    record_id = _text(data, "recordId")
    if not record_id:
        raise ValidationError('Missing "recordId" parameter. REQUIRED')

    product = _text(data, "puppeteerProduct").lower() or "chrome"
    if product not in CHROMIUM_PRODUCTS:
        raise ValidationError(f"PDF rendering requires chrome, got '{product}'")

    width = _text(data, "width") or None
    height = _text(data, "height") or None
    if "pageFormat" in data and not data.get("pageFormat") and (width or height):
        page_format = None
    else:
        page_format = _text(data, "pageFormat") or "Letter"
    if page_format is not None:
        matches = [name for name in PAGE_FORMATS if name.lower() == page_format.lower()]
        if not matches:
            raise ValidationError(f"Unsupported pageFormat: {page_format}")
        page_format = matches[0]

    media = _text(data, "emulateMediaType").lower() or None
    if media is not None and media not in MEDIA_TYPES:
        raise ValidationError(f"Unsupported emulateMediaType: {media}")

    wait_until_raw = _text(data, "waitUntil") or "networkidle2"
    wait_until = WAIT_UNTIL.get(wait_until_raw.lower())
    if wait_until is None:
        raise ValidationError(f"Unsupported waitUntil: {wait_until_raw}")

    try:
        scale = float(data.get("scale") or 1)
    except (TypeError, ValueError) as exc:
        raise ValidationError("scale must be a number") from exc
    if not 0.1 <= scale <= 2:
        raise ValidationError("scale must be between 0.1 and 2")

    filename = _text(data, "filename") or record_id
    if not filename.lower().endswith(".pdf"):
        filename = f"{filename}.pdf"

    display_header_footer = bool(data.get("displayHeaderFooter"))
    return PdfOptions(
        path=path,
        record_id=record_id,
        filename=filename,
        page_format=page_format,
        headless=data.get("headless") is not False,
        incognito=bool(data.get("incognito")),
        emulate_media_type=media,
        wait_until=wait_until,
        auto_scroll=bool(data.get("autoScroll")),
        fit_window=bool(data.get("fitWindow")),
        mobile=bool(data.get("mobile")),
        width=width,
        height=height,
        margin=_margin(data.get("margin")),
        scale=scale,
        prefer_css_page_size=bool(data.get("preferCSSPageSize")),
        display_header_footer=display_header_footer,
        header_template=_text(data, "headerTemplate") if display_header_footer else "",
        footer_template=_text(data, "footerTemplate") if display_header_footer else "",
        print_background=bool(data.get("printBackground")),
        landscape=bool(data.get("landscape")),
        page_ranges=_text(data, "pageRanges"),
    )
