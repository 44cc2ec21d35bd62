"""Field-fill package: document adapters, fill engine and page filler"""
from .dom import Document, Element, SelectOption
from .engine import (
    FieldFillEngine,
    FieldSpec,
    FillOutcome,
    LocationStrategy,
    LocatorKind,
    NOTIFICATION_EVENTS,
    OPTION_MATCHERS,
    match_exact_value,
    match_text_substring
)
from .html_document import HtmlDocument, HtmlElement
from .page_document import PageDocument, PageElement
from .page_filler import PageFiller
from .retry import RetryPolicy

__all__ = [
    'Document',
    'Element',
    'SelectOption',
    'FieldFillEngine',
    'FieldSpec',
    'FillOutcome',
    'LocationStrategy',
    'LocatorKind',
    'NOTIFICATION_EVENTS',
    'OPTION_MATCHERS',
    'match_exact_value',
    'match_text_substring',
    'HtmlDocument',
    'HtmlElement',
    'PageDocument',
    'PageElement',
    'PageFiller',
    'RetryPolicy'
]
