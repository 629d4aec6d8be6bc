"""CSS-selector queries over fetched HTML, backed by lxml."""
from __future__ import annotations

import logging
from typing import Optional, Union

import lxml.html
from cssselect import SelectorError
from lxml import etree

from .entities import RawWeatherFields


logger = logging.getLogger(__name__)

TEMPERATURE_SELECTOR = 'div[class="today_nowcard-temp"] span'
CONDITION_ICON_SELECTOR = 'div[class="today_nowcard-section today_nowcard-condition"] div icon'
DEGREE_SIGN = "\N{DEGREE SIGN}"


class ExtractionFailed(RuntimeError):
    """The document lacks a usable temperature or condition icon."""


class Element:
    def __init__(self, node: lxml.html.HtmlElement) -> None:
        self._node = node

    def text(self) -> str:
        return " ".join(self._node.text_content().split())

    def class_name(self) -> str:
        return self._node.get("class") or ""


class Document:
    def __init__(self, root: lxml.html.HtmlElement) -> None:
        self._root = root

    @classmethod
    def parse(cls, content: Union[bytes, str], encoding: str = "utf-8") -> "Document":
        if isinstance(content, bytes):
            content = content.decode(encoding, errors="replace")
        try:
            root = lxml.html.document_fromstring(content)
        except (etree.ParserError, ValueError) as exc:
            raise ExtractionFailed(f"unparseable document: {exc}") from exc
        return cls(root)

    def select_first(self, selector: str) -> Optional[Element]:
        try:
            matches = self._root.cssselect(selector)
        except SelectorError as exc:
            raise ExtractionFailed(f"invalid selector {selector!r}") from exc
        return Element(matches[0]) if matches else None


def extract_fields(
    document: Document,
    temperature_selector: str = TEMPERATURE_SELECTOR,
    condition_selector: str = CONDITION_ICON_SELECTOR,
) -> RawWeatherFields:
    """Pull the Fahrenheit temperature and the icon class out of the page."""
    temperature_element = document.select_first(temperature_selector)
    condition_element = document.select_first(condition_selector)
    if temperature_element is None or condition_element is None:
        raise ExtractionFailed("temperature or condition element not found")

    temperature_text = temperature_element.text().replace(DEGREE_SIGN, "").strip()
    condition_token = condition_element.class_name()
    if not temperature_text or not condition_token.strip():
        raise ExtractionFailed("temperature or condition icon is empty")
    try:
        temperature_f = int(temperature_text)
    except ValueError as exc:
        raise ExtractionFailed(f"non-numeric temperature {temperature_text!r}") from exc

    logger.debug("extracted temperature_f=%s condition_token=%r", temperature_f, condition_token)
    return RawWeatherFields(temperature_f=temperature_f, condition_token=condition_token)


__all__ = [
    "CONDITION_ICON_SELECTOR",
    "Document",
    "Element",
    "ExtractionFailed",
    "TEMPERATURE_SELECTOR",
    "extract_fields",
]
