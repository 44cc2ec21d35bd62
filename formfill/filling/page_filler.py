"""
Consumer of fillForm pushes inside the CEAC page context
"""
import logging
from typing import Any, List, Mapping, Optional

from ..config import FillConfig
from .dom import Document
from .engine import FieldFillEngine, FieldSpec
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


class PageFiller:
    """Waits for the form to render, then fills it from the field map"""

    def __init__(
        self,
        fill_config: FillConfig,
        engine: Optional[FieldFillEngine] = None,
        retry_policy: Optional[RetryPolicy] = None
    ):
        self.fill_config = fill_config
        self.engine = engine or FieldFillEngine()
        self.retry_policy = retry_policy or RetryPolicy(
            initial_delay=fill_config.initial_delay,
            max_attempts=fill_config.retry_attempts,
            interval=fill_config.retry_interval
        )

    def build_field_specs(self, fields: Mapping[str, Any]) -> List[FieldSpec]:
        """FieldSpecs for every mapped field that has a value, in map order"""
        specs = []
        for name, locator in self.fill_config.fields.items():
            value = fields.get(name)
            if value is None or value == "":
                logger.debug(f"Skipping {name} - no data provided")
                continue
            specs.append(FieldSpec.from_locator(locator, str(value)))
        return specs

    async def anchor_present(self, document: Document) -> bool:
        """Whether the first mapped field has rendered yet"""
        if not self.fill_config.fields:
            return True
        anchor = next(iter(self.fill_config.fields.values()))
        spec = FieldSpec.from_locator(anchor, "")
        element, _ = await self.engine.locate(document, spec)
        return element is not None

    async def handle_fill_form(self, document: Document, fields: Mapping[str, Any]) -> int:
        """Fill the page once the anchor appears, or anyway after retries run out"""
        specs = self.build_field_specs(fields)

        if not await self.retry_policy.wait_for(lambda: self.anchor_present(document)):
            logger.info("Anchor field never appeared, attempting fill anyway")

        count = await self.engine.fill(document, specs)
        logger.info(f"Filled {count} of {len(specs)} fields on CEAC website")
        return count
