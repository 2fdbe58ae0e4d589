"""
Page object tests against a mocked Playwright page.
Locators are MagicMocks; anything awaited is an AsyncMock.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from aggregate import collect_exceeding_threshold
from extract import (
    ARIA_LABELS_JS,
    FIRST_ROW_CHANGED_JS,
    HOME_TITLE,
    ROW_TEXTS_JS,
    ROWS_SELECTOR,
    FTSE100Page,
    HomePage,
)


@pytest.fixture
def locator():
    loc = MagicMock()
    loc.first.wait_for = AsyncMock()
    loc.evaluate_all = AsyncMock(return_value=[])
    loc.is_visible = AsyncMock(return_value=True)
    loc.is_enabled = AsyncMock(return_value=True)
    loc.click = AsyncMock()
    loc.first.text_content = AsyncMock(return_value="Shell")
    return loc


@pytest.fixture
def page(locator):
    pg = MagicMock()
    pg.locator.return_value = locator
    pg.wait_for_load_state = AsyncMock()
    pg.wait_for_function = AsyncMock()
    pg.goto = AsyncMock()
    pg.title = AsyncMock(return_value=HOME_TITLE)
    return pg


@pytest.mark.asyncio
async def test_current_page_row_texts(page, locator):
    locator.evaluate_all.return_value = [["Shell", "1.2", "160,432"], ["BP", "-0.3", "70,100"]]
    ftse = FTSE100Page(page)

    rows = await ftse.current_page_row_texts()

    assert rows == [("Shell", "1.2", "160,432"), ("BP", "-0.3", "70,100")]
    locator.evaluate_all.assert_awaited_once_with(ROW_TEXTS_JS)
    page.wait_for_load_state.assert_awaited_with('networkidle')


@pytest.mark.asyncio
async def test_current_page_row_texts_empty_when_no_rows_render(page, locator):
    locator.first.wait_for.side_effect = PlaywrightTimeoutError("Timeout 15000ms exceeded")
    ftse = FTSE100Page(page)

    assert await ftse.current_page_row_texts() == []
    locator.evaluate_all.assert_not_awaited()


@pytest.mark.asyncio
async def test_has_next_page_looks_up_following_number(page, locator):
    ftse = FTSE100Page(page)

    assert await ftse.has_next_page(2) is True
    page.locator.assert_called_with('//a[contains(@class, "page-number") and text()="3"]')


@pytest.mark.asyncio
async def test_has_next_page_false_when_link_hidden(page, locator):
    locator.is_visible.return_value = False
    ftse = FTSE100Page(page)

    assert await ftse.has_next_page(1) is False
    locator.is_enabled.assert_not_awaited()


@pytest.mark.asyncio
async def test_go_to_next_page_success(page, locator):
    locator.first.text_content.side_effect = ["Shell 1.2 160,432", "Glencore 0.8 50,210"]
    ftse = FTSE100Page(page)

    assert await ftse.go_to_next_page(1) is True
    locator.click.assert_awaited_once()
    page.wait_for_function.assert_awaited_once_with(
        FIRST_ROW_CHANGED_JS, arg=[ROWS_SELECTOR, "Shell 1.2 160,432"], timeout=15000)


@pytest.mark.asyncio
async def test_go_to_next_page_false_when_rows_unchanged(page, locator):
    ftse = FTSE100Page(page)

    assert await ftse.go_to_next_page(1) is False
    locator.click.assert_awaited_once()


@pytest.mark.asyncio
async def test_go_to_next_page_false_when_rows_never_change(page, locator):
    page.wait_for_function.side_effect = PlaywrightTimeoutError("Timeout 15000ms exceeded")
    ftse = FTSE100Page(page)

    assert await ftse.go_to_next_page(1) is False


@pytest.mark.asyncio
async def test_go_to_next_page_timeout_returns_false(page, locator):
    locator.click.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")
    ftse = FTSE100Page(page)

    assert await ftse.go_to_next_page(1) is False


@pytest.mark.asyncio
async def test_go_to_next_page_playwright_error_returns_false(page, locator):
    locator.click.side_effect = PlaywrightError("Element is not attached to the DOM")
    ftse = FTSE100Page(page)

    assert await ftse.go_to_next_page(1) is False


@pytest.mark.asyncio
async def test_stuck_pager_does_not_repeat_first_page(page, locator):
    locator.evaluate_all.return_value = [["Shell", "1.2", "160,432"], ["BP", "-0.3", "70,100"]]
    ftse = FTSE100Page(page)

    records = await collect_exceeding_threshold(ftse, 0)

    assert [r.name for r in records] == ["Shell", "BP"]


@pytest.mark.asyncio
async def test_detached_link_keeps_collected_rows(page, locator):
    locator.evaluate_all.return_value = [["Shell", "1.2", "160,432"], ["BP", "-0.3", "70,100"]]
    locator.click.side_effect = PlaywrightError("Element is not attached to the DOM")
    ftse = FTSE100Page(page)

    records = await collect_exceeding_threshold(ftse, 0)

    assert [r.name for r in records] == ["Shell", "BP"]


@pytest.mark.asyncio
async def test_enter_from_date_year_waits_for_chart(page, locator):
    locator.fill = AsyncMock()
    locator.press = AsyncMock()
    assertions = MagicMock()
    assertions.to_be_visible = AsyncMock()
    assertions.to_be_hidden = AsyncMock()
    ftse = FTSE100Page(page)

    with patch("extract.expect", return_value=assertions) as mock_expect:
        await ftse.enter_from_date_year(2023)

    locator.fill.assert_awaited_once_with("2023")
    locator.press.assert_awaited_once_with('Enter')
    assertions.to_be_hidden.assert_awaited_once()
    mock_expect.assert_called_with(ftse.chart_root)


@pytest.mark.asyncio
async def test_current_chart_labels(page, locator):
    locator.evaluate_all.return_value = ["Price of base is 7 000,00 on 1 May 2021"]
    ftse = FTSE100Page(page)

    labels = await ftse.current_chart_labels()

    assert labels == ["Price of base is 7 000,00 on 1 May 2021"]
    locator.first.wait_for.assert_awaited_with(state='hidden')
    locator.evaluate_all.assert_awaited_once_with(ARIA_LABELS_JS)


@pytest.mark.asyncio
async def test_home_page_dismisses_cookie_banner(page):
    banner = MagicMock()
    banner.is_visible = AsyncMock(return_value=True)
    banner.click = AsyncMock()
    page.get_by_role.return_value = banner
    home = HomePage(page)

    await home.goto("https://example.test/")

    page.goto.assert_awaited_once_with("https://example.test/", timeout=60000)
    banner.click.assert_awaited_once()


@pytest.mark.asyncio
async def test_home_page_title_ok(page, locator):
    locator.first.text_content = AsyncMock(return_value="Markets latest ")
    home = HomePage(page)

    assert await home.title_ok() is True

    page.title.return_value = "Something else"
    assert await home.title_ok() is False
