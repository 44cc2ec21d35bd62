"""
Field-fill engine
Locates form controls through ordered location strategies, assigns values
and notifies listeners attached by the page
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import FieldLocator
from ..errors import ElementNotFound
from .dom import Document, Element, SelectOption

logger = logging.getLogger(__name__)

# Fixed order; "onchange" is kept for ASP.NET handlers on the CEAC page
NOTIFICATION_EVENTS: Tuple[str, ...] = ("change", "input", "blur", "onchange")


class LocatorKind(Enum):
    """How a location strategy expression is evaluated"""
    XPATH = "xpath"
    CSS = "css"


@dataclass(frozen=True)
class LocationStrategy:
    """One attempt at finding an element"""
    kind: LocatorKind
    expression: str


@dataclass
class FieldSpec:
    """A field to fill: where to look for it and what to put in it"""
    field_name: str
    strategies: List[LocationStrategy]
    value: str

    @classmethod
    def from_locator(cls, locator: FieldLocator, value: str) -> "FieldSpec":
        strategies = []
        if locator.xpath:
            strategies.append(LocationStrategy(LocatorKind.XPATH, locator.xpath))
        strategies.extend(LocationStrategy(LocatorKind.CSS, s) for s in locator.selectors)
        return cls(field_name=locator.name, strategies=strategies, value=value)


@dataclass
class FillOutcome:
    """What happened to one field during a fill"""
    field_name: str
    found: bool
    source: Optional[LocatorKind] = None
    filled: bool = False
    tier: Optional[str] = None
    error: Optional[ElementNotFound] = field(default=None, repr=False)


def match_exact_value(options: Sequence[SelectOption], value: str) -> Optional[str]:
    """Option whose value equals the desired value"""
    return next((o.value for o in options if o.value == value), None)


def match_text_substring(options: Sequence[SelectOption], value: str) -> Optional[str]:
    """Option whose text contains the desired value"""
    return next((o.value for o in options if value in o.text), None)


OptionMatcher = Callable[[Sequence[SelectOption], str], Optional[str]]

# Evaluated in order; if none matches, the raw value is assigned
OPTION_MATCHERS: Tuple[Tuple[str, OptionMatcher], ...] = (
    ("exact-value", match_exact_value),
    ("text-substring", match_text_substring),
)
RAW_FALLBACK_TIER = "raw-value"


class FieldFillEngine:
    """Fills form fields on a document"""

    def __init__(self, notification_events: Sequence[str] = NOTIFICATION_EVENTS):
        self.notification_events = tuple(notification_events)
        self.last_outcomes: List[FillOutcome] = []

    async def locate(
        self,
        document: Document,
        spec: FieldSpec
    ) -> Tuple[Optional[Element], Optional[LocatorKind]]:
        """Find the target element, trying XPath strategies before CSS selectors"""
        xpath = [s for s in spec.strategies if s.kind is LocatorKind.XPATH]
        css = [s for s in spec.strategies if s.kind is LocatorKind.CSS]

        for strategy in xpath:
            logger.debug(f"Trying XPath for {spec.field_name}: {strategy.expression}")
            if element := await document.find_by_xpath(strategy.expression):
                return element, LocatorKind.XPATH

        for strategy in css:
            logger.debug(f"Trying CSS for {spec.field_name}: {strategy.expression}")
            if element := await document.query_selector(strategy.expression):
                return element, LocatorKind.CSS

        return None, None

    async def assign(self, element: Element, value: str) -> str:
        """
        Assign value to element and return the tier that was used.

        Selection controls go through OPTION_MATCHERS and fall back to
        assigning the raw value, which the page may ignore.
        """
        if await element.get_tag_name() != "SELECT":
            await element.set_value(value)
            return "text"

        options = await element.get_options()
        for tier, matcher in OPTION_MATCHERS:
            if (option_value := matcher(options, value)) is not None:
                await element.select_option(option_value)
                return tier

        logger.warning(
            f"No option matched {value!r}; first options: "
            f"{[f'[{o.value}] {o.text.strip()}' for o in options[:20]]}"
        )
        await element.set_value(value)
        return RAW_FALLBACK_TIER

    async def notify(self, element: Element) -> None:
        """Dispatch the change notifications in their fixed order"""
        for event_type in self.notification_events:
            await element.dispatch_event(event_type)

    async def fill(self, document: Document, field_specs: Sequence[FieldSpec]) -> int:
        """
        Fill each field in the given order.

        Fields whose element cannot be found are logged and skipped.

        Returns:
            Number of fields filled
        """
        outcomes: List[FillOutcome] = []

        for spec in field_specs:
            element, source = await self.locate(document, spec)

            if element is None:
                error = ElementNotFound(spec.field_name)
                logger.warning(f"NOT FOUND: {error.message}")
                outcomes.append(FillOutcome(spec.field_name, found=False, error=error))
                continue

            tier = await self.assign(element, spec.value)
            await self.notify(element)
            logger.info(f"Filled {spec.field_name} via {source.value} ({tier})")
            outcomes.append(FillOutcome(spec.field_name, found=True, source=source, filled=True, tier=tier))

        self.last_outcomes = outcomes
        return sum(1 for outcome in outcomes if outcome.filled)
