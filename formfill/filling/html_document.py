"""
lxml-backed document adapter

Works on static HTML snapshots. Dispatched events are recorded on the
document so listeners can be inspected after a fill.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from cssselect import SelectorError
from lxml import etree
from lxml import html as lxml_html

from .dom import Document, Element, SelectOption

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchedEvent:
    """An event dispatched on an element"""
    element_id: Optional[str]
    event_type: str
    bubbles: bool = True


class HtmlElement(Element):
    """Element adapter over an lxml node"""

    def __init__(self, node: lxml_html.HtmlElement, document: "HtmlDocument"):
        self.node = node
        self.document = document

    async def get_tag_name(self) -> str:
        return str(self.node.tag).upper()

    def _option_nodes(self) -> List[lxml_html.HtmlElement]:
        return list(self.node.iter("option"))

    @staticmethod
    def _option_value(option: lxml_html.HtmlElement) -> str:
        # Without a value attribute a browser uses the text, whitespace collapsed
        value = option.get("value")
        return value if value is not None else " ".join(option.text_content().split())

    async def get_options(self) -> List[SelectOption]:
        return [
            SelectOption(value=self._option_value(option), text=option.text_content())
            for option in self._option_nodes()
        ]

    def _select(self, value: str) -> None:
        selected = False
        for option in self._option_nodes():
            if not selected and self._option_value(option) == value:
                option.set("selected", "selected")
                selected = True
            elif "selected" in option.attrib:
                del option.attrib["selected"]

    async def select_option(self, value: str) -> None:
        self._select(value)

    async def set_value(self, value: str) -> None:
        tag = await self.get_tag_name()
        if tag == "SELECT":
            # Like a browser: an unknown value leaves nothing selected
            self._select(value)
        elif tag == "TEXTAREA":
            self.node.text = value
        else:
            self.node.set("value", value)

    async def get_value(self) -> str:
        tag = await self.get_tag_name()
        if tag == "SELECT":
            for option in self._option_nodes():
                if "selected" in option.attrib:
                    return self._option_value(option)
            return ""
        if tag == "TEXTAREA":
            return self.node.text or ""
        return self.node.get("value", "")

    async def dispatch_event(self, event_type: str) -> None:
        self.document.dispatched.append(
            DispatchedEvent(element_id=self.node.get("id"), event_type=event_type)
        )


class HtmlDocument(Document):
    """Document adapter over an lxml tree"""

    def __init__(self, root: lxml_html.HtmlElement):
        self.root = root
        self.dispatched: List[DispatchedEvent] = []

    @classmethod
    def from_string(cls, markup: str) -> "HtmlDocument":
        return cls(lxml_html.document_fromstring(markup))

    def events_for(self, element_id: str) -> List[str]:
        """Event types dispatched on the element with the given id, in order"""
        return [e.event_type for e in self.dispatched if e.element_id == element_id]

    def _wrap(self, node) -> Optional[HtmlElement]:
        return HtmlElement(node, self) if node is not None else None

    async def find_by_xpath(self, expression: str) -> Optional[Element]:
        try:
            result = self.root.xpath(expression)
        except etree.XPathError as e:
            logger.warning(f"Invalid XPath {expression!r}: {e}")
            return None

        if not isinstance(result, list):
            return None
        # Skip text, attribute and comment results
        node = next((item for item in result if isinstance(getattr(item, "tag", None), str)), None)
        return self._wrap(node)

    async def query_selector(self, selector: str) -> Optional[Element]:
        try:
            matches = self.root.cssselect(selector)
        except SelectorError as e:
            logger.warning(f"Invalid CSS selector {selector!r}: {e}")
            return None

        return self._wrap(matches[0] if matches else None)
