"""
Abstract document interface used by the field-fill engine

Adapters exist for static HTML (lxml) and for a live Playwright page.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class SelectOption:
    """One option of a selection control"""
    value: str
    text: str


class Element(ABC):
    """A located form control"""

    @abstractmethod
    async def get_tag_name(self) -> str:
        """Upper-case tag name, e.g. SELECT or INPUT"""
        pass

    @abstractmethod
    async def get_options(self) -> List[SelectOption]:
        """Options of a selection control, in document order"""
        pass

    @abstractmethod
    async def select_option(self, value: str) -> None:
        """Select the first option whose value equals value"""
        pass

    @abstractmethod
    async def set_value(self, value: str) -> None:
        """Assign value directly to the control"""
        pass

    @abstractmethod
    async def get_value(self) -> str:
        """Current value of the control"""
        pass

    @abstractmethod
    async def dispatch_event(self, event_type: str) -> None:
        """Dispatch a bubbling event of the given type on the control"""
        pass


class Document(ABC):
    """A page that form controls can be located in"""

    @abstractmethod
    async def find_by_xpath(self, expression: str) -> Optional[Element]:
        """First element in document order matching the XPath expression"""
        pass

    @abstractmethod
    async def query_selector(self, selector: str) -> Optional[Element]:
        """First element in document order matching the CSS selector"""
        pass
