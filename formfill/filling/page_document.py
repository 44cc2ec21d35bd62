"""
Playwright-backed document adapter for the live CEAC page
"""
import logging
from typing import List, Optional

from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError

from .dom import Document, Element, SelectOption

logger = logging.getLogger(__name__)

ASSIGN_VALUE_SCRIPT = "(node, value) => { node.value = value; }"

SELECT_OPTION_SCRIPT = """(node, value) => {
    node.value = value;
    for (const option of node.options) {
        if (option.value === value) { option.selected = true; break; }
    }
}"""

READ_OPTIONS_SCRIPT = "options => options.map(o => ({value: o.value, text: o.textContent}))"


class PageElement(Element):
    """Element adapter over a Playwright element handle"""

    def __init__(self, handle: ElementHandle):
        self.handle = handle

    async def get_tag_name(self) -> str:
        return str(await self.handle.evaluate("node => node.tagName")).upper()

    async def get_options(self) -> List[SelectOption]:
        options = await self.handle.eval_on_selector_all("option", READ_OPTIONS_SCRIPT)
        return [SelectOption(value=o["value"], text=o["text"] or "") for o in options]

    async def select_option(self, value: str) -> None:
        # Assigned through the DOM so no extra events fire besides our own
        await self.handle.evaluate(SELECT_OPTION_SCRIPT, value)

    async def set_value(self, value: str) -> None:
        await self.handle.evaluate(ASSIGN_VALUE_SCRIPT, value)

    async def get_value(self) -> str:
        return str(await self.handle.evaluate("node => node.value"))

    async def dispatch_event(self, event_type: str) -> None:
        await self.handle.dispatch_event(event_type, {"bubbles": True})


class PageDocument(Document):
    """Document adapter over a Playwright page"""

    def __init__(self, page: Page):
        self.page = page

    async def _query(self, selector: str) -> Optional[Element]:
        try:
            handle = await self.page.query_selector(selector)
        except PlaywrightError as e:
            logger.warning(f"Lookup failed for {selector!r}: {e}")
            return None
        return PageElement(handle) if handle else None

    async def find_by_xpath(self, expression: str) -> Optional[Element]:
        return await self._query(f"xpath={expression}")

    async def query_selector(self, selector: str) -> Optional[Element]:
        return await self._query(f"css={selector}")
