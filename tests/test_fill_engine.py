"""
Unit tests for the field-fill engine, retry policy and page filler
"""
import pytest
from unittest.mock import AsyncMock, patch

from formfill.config import FillConfig, default_field_locators
from formfill.filling import (
    FieldFillEngine,
    FieldSpec,
    HtmlDocument,
    LocationStrategy,
    LocatorKind,
    NOTIFICATION_EVENTS,
    PageFiller,
    RetryPolicy,
    SelectOption,
    match_exact_value,
    match_text_substring
)

COUNTRY_ID = "ctl00_SiteContentPlaceHolder_ucLocation_ddlLocation"
CAPTCHA_ID = "ctl00_SiteContentPlaceHolder_ucCaptcha_txtCaptchaCode"

CEAC_PAGE = f"""
<html><body><form id="aspnetForm">
  <select id="{COUNTRY_ID}" name="ctl00$SiteContentPlaceHolder$ucLocation$ddlLocation">
    <option value="">- SELECT ONE -</option>
    <option value="ALG">ALGERIA, ALGIERS</option>
    <option value="DEU">GERMANY</option>
  </select>
  <input type="text" id="{CAPTCHA_ID}" name="captcha_code" />
</form></body></html>
"""


def country_spec(value):
    return FieldSpec.from_locator(default_field_locators()["country"], value)


def captcha_spec(value):
    return FieldSpec.from_locator(default_field_locators()["captcha"], value)


class TestOptionMatchers:
    """Each option-matching tier on its own"""

    OPTIONS = [SelectOption(value="DEU", text="GERMANY"), SelectOption(value="FRA", text=" FRANCE ")]

    def test_exact_value(self):
        assert match_exact_value(self.OPTIONS, "FRA") == "FRA"
        assert match_exact_value(self.OPTIONS, "GERMANY") is None

    def test_text_substring(self):
        assert match_text_substring(self.OPTIONS, "GERMANY") == "DEU"
        assert match_text_substring(self.OPTIONS, "FRANCE") == "FRA"
        assert match_text_substring(self.OPTIONS, "SPAIN") is None


class TestFieldFillEngine:
    """Test cases for FieldFillEngine"""

    @pytest.fixture
    def engine(self):
        return FieldFillEngine()

    @pytest.mark.asyncio
    async def test_select_via_text_match(self, engine):
        """A single DEU/GERMANY option is selected through the text tier"""
        document = HtmlDocument.from_string(
            f'<html><body><select id="{COUNTRY_ID}"><option value="DEU">GERMANY</option></select></body></html>'
        )

        count = await engine.fill(document, [country_spec("GERMANY")])

        assert count == 1
        element = await document.find_by_xpath(f'//*[@id="{COUNTRY_ID}"]')
        assert await element.get_value() == "DEU"
        assert engine.last_outcomes[0].tier == "text-substring"
        assert document.events_for(COUNTRY_ID) == ["change", "input", "blur", "onchange"]

    @pytest.mark.asyncio
    async def test_exact_value_wins(self, engine):
        document = HtmlDocument.from_string(CEAC_PAGE)

        await engine.fill(document, [country_spec("ALG")])

        element = await document.query_selector(f"#{COUNTRY_ID}")
        assert await element.get_value() == "ALG"
        assert engine.last_outcomes[0].tier == "exact-value"
        assert engine.last_outcomes[0].source is LocatorKind.XPATH

    @pytest.mark.asyncio
    async def test_raw_fallback(self, engine):
        document = HtmlDocument.from_string(CEAC_PAGE)

        count = await engine.fill(document, [country_spec("ATLANTIS")])

        assert count == 1
        assert engine.last_outcomes[0].tier == "raw-value"
        element = await document.query_selector(f"#{COUNTRY_ID}")
        assert await element.get_value() == ""
        assert document.events_for(COUNTRY_ID) == list(NOTIFICATION_EVENTS)

    @pytest.mark.asyncio
    async def test_option_without_value_uses_collapsed_text(self, engine):
        document = HtmlDocument.from_string(
            f'<html><body><select id="{COUNTRY_ID}">'
            '<option>\n   ALGERIA,\n   ALGIERS  </option><option>\n  GERMANY \n</option>'
            '</select></body></html>'
        )
        element = await document.find_by_xpath(f'//*[@id="{COUNTRY_ID}"]')

        options = await element.get_options()
        assert [option.value for option in options] == ["ALGERIA, ALGIERS", "GERMANY"]

        await engine.fill(document, [country_spec("GERMANY")])

        assert await element.get_value() == "GERMANY"
        assert engine.last_outcomes[0].tier == "exact-value"

    @pytest.mark.asyncio
    async def test_text_input(self, engine):
        document = HtmlDocument.from_string(CEAC_PAGE)

        count = await engine.fill(document, [captcha_spec("AB12")])

        assert count == 1
        element = await document.find_by_xpath(f'//*[@id="{CAPTCHA_ID}"]')
        assert await element.get_value() == "AB12"
        assert engine.last_outcomes[0].tier == "text"

    @pytest.mark.asyncio
    async def test_css_fallback_in_order(self, engine):
        document = HtmlDocument.from_string(
            '<html><body>'
            '<select id="country_a"><option value="X">X</option></select>'
            '<select name="Country"><option value="DEU">GERMANY</option></select>'
            '</body></html>'
        )

        count = await engine.fill(document, [country_spec("GERMANY")])

        assert count == 1
        assert engine.last_outcomes[0].source is LocatorKind.CSS
        selected = await document.query_selector('select[name="Country"]')
        assert await selected.get_value() == "DEU"

    @pytest.mark.asyncio
    async def test_xpath_tried_before_css(self, engine):
        document = HtmlDocument.from_string(
            '<html><body><input id="first" /><input id="second" /></body></html>'
        )
        spec = FieldSpec(
            field_name="captcha",
            strategies=[
                LocationStrategy(LocatorKind.CSS, "#first"),
                LocationStrategy(LocatorKind.XPATH, '//*[@id="second"]'),
            ],
            value="AB12"
        )

        await engine.fill(document, [spec])

        assert document.events_for("second") == list(NOTIFICATION_EVENTS)
        assert document.events_for("first") == []

    @pytest.mark.asyncio
    async def test_missing_field_skipped(self, engine):
        document = HtmlDocument.from_string(
            f'<html><body><input id="{CAPTCHA_ID}" /></body></html>'
        )

        count = await engine.fill(document, [country_spec("GERMANY"), captcha_spec("AB12")])

        assert count == 1
        missing, filled = engine.last_outcomes
        assert missing.found is False
        assert missing.error.field_name == "country"
        assert filled.filled is True

    @pytest.mark.asyncio
    async def test_invalid_expressions_do_not_raise(self, engine):
        document = HtmlDocument.from_string(CEAC_PAGE)
        spec = FieldSpec(
            field_name="broken",
            strategies=[
                LocationStrategy(LocatorKind.XPATH, "//*[@id="),
                LocationStrategy(LocatorKind.CSS, "select[[["),
            ],
            value="x"
        )

        assert await engine.fill(document, [spec]) == 0

    @pytest.mark.asyncio
    async def test_events_dispatched_once_each(self, engine):
        document = HtmlDocument.from_string(CEAC_PAGE)

        await engine.fill(document, [country_spec("GERMANY"), captcha_spec("AB12")])

        assert [e.event_type for e in document.dispatched] == list(NOTIFICATION_EVENTS) * 2
        assert all(e.bubbles for e in document.dispatched)


class TestRetryPolicy:
    """Test cases for RetryPolicy"""

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        check = AsyncMock(return_value=False)

        with patch("formfill.filling.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            found = await RetryPolicy(initial_delay=0.5, max_attempts=5, interval=1.0).wait_for(check)

        assert found is False
        assert check.await_count == 5
        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.5, 1.0, 1.0, 1.0, 1.0]

    @pytest.mark.asyncio
    async def test_stops_when_found(self):
        check = AsyncMock(side_effect=[False, False, True])

        with patch("formfill.filling.retry.asyncio.sleep", new_callable=AsyncMock):
            found = await RetryPolicy().wait_for(check)

        assert found is True
        assert check.await_count == 3


class TestPageFiller:
    """Test cases for PageFiller"""

    @pytest.fixture
    def filler(self):
        return PageFiller(FillConfig())

    def test_build_field_specs_skips_empty(self, filler):
        specs = filler.build_field_specs({"captcha": "", "country": "GERMANY", "unknown": "x"})

        assert [spec.field_name for spec in specs] == ["country"]
        assert specs[0].strategies[0].kind is LocatorKind.XPATH

    @pytest.mark.asyncio
    async def test_fills_when_anchor_present(self, filler):
        document = HtmlDocument.from_string(CEAC_PAGE)

        with patch("formfill.filling.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            count = await filler.handle_fill_form(document, {"country": "GERMANY", "captcha": "AB12"})

        assert count == 2
        # Only the initial delay; the anchor was there on the first check
        assert mock_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_anchor_found_through_css_selector(self, filler):
        # No element carries the XPath id; the name selector still finds the anchor
        document = HtmlDocument.from_string(
            '<html><body><select name="Country"><option value="DEU">GERMANY</option></select></body></html>'
        )

        assert await filler.anchor_present(document) is True
        assert await filler.anchor_present(HtmlDocument.from_string("<html><body></body></html>")) is False

    @pytest.mark.asyncio
    async def test_fills_anyway_without_anchor(self, filler):
        document = HtmlDocument.from_string(
            '<html><body><input id="captcha_code" /></body></html>'
        )

        with patch("formfill.filling.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            count = await filler.handle_fill_form(document, {"country": "GERMANY", "captcha": "AB12"})

        assert count == 1
        assert mock_sleep.await_count == 5
        element = await document.query_selector("#captcha_code")
        assert await element.get_value() == "AB12"
