import re

from playwright.async_api import Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeoutError, expect

HOME_URL = "https://www.londonstockexchange.com/"
HOME_TITLE = "London Stock Exchange homepage | London Stock Exchange"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"

# Reads (name, % change, market cap) cell text from every rendered row
ROW_TEXTS_JS = """
rows => rows.map(row => [
    row.querySelector('td.instrument-name')?.textContent?.trim() || '',
    row.querySelector('td.instrument-percentualchange')?.textContent?.trim() || '',
    row.querySelector('td.instrument-marketcapitalization')?.textContent?.trim() || '',
])
"""
ARIA_LABELS_JS = "els => els.map(el => el.getAttribute('aria-label') || '')"
ROWS_SELECTOR = 'table.full-width tbody tr'
# True once the first row no longer shows the text it had before the click
FIRST_ROW_CHANGED_JS = """
([selector, before]) => {
    const row = document.querySelector(selector);
    return !!row && row.textContent.trim() !== before;
}
"""


async def open_page(p, headless=True):
    """
    EXTRACT LAYER:
    Launches Chromium and returns (browser, page). Caller closes the browser.
    """
    print("1. [EXTRACT] Launching Browser...")
    browser = await p.chromium.launch(headless=headless)
    context = await browser.new_context(user_agent=USER_AGENT)
    page = await context.new_page()
    return browser, page


class HomePage:
    def __init__(self, page: Page):
        self.page = page
        self.markets_header = page.locator('h2.bold-font-weight.title')
        self.cookies_button = page.get_by_role('button', name='Accept all cookies')

    async def goto(self, url=HOME_URL):
        await self.page.goto(url, timeout=60000)
        await self.page.wait_for_load_state('networkidle')

        if await self.cookies_button.is_visible():
            await self.cookies_button.click()
            print("   -> Cookie banner dismissed.")

    async def title_ok(self):
        title = await self.page.title()
        header = (await self.markets_header.first.text_content() or '').strip()
        return title == HOME_TITLE and header.startswith('Markets latest')


class FTSE100Page:
    """Page object for the FTSE-100 index page. Implements the aggregate.PageProvider calls."""

    def __init__(self, page: Page):
        self.page = page
        self.index_table = page.locator('//table[(contains(@class,"ftse-index-table-table"))]')
        self.percentage_change_header = page.locator('th.percentualchange.hide-on-landscape > span:first-of-type')
        self.table_rows = page.locator(ROWS_SELECTOR)
        self.constituents_link = page.get_by_role('link', name='Constituents')
        self.quick_link_ftse = page.locator('//table[@class="table-in-rich-text"]//td[2]//a').first
        self.low_to_high = page.get_by_role('listitem').filter(has_text='Lowest – highest').locator('div')
        self.high_to_low = page.get_by_role('listitem').filter(has_text='Highest – lowest').locator('div')
        self.market_cap_header = page.get_by_text('Market cap (m)')
        self.from_year_input = page.locator('//input[@aria-label="Year in from date"]')
        self.periodicity_dropdown = page.locator('//div[contains(@class,"periodicity")]')
        self.chart_points = page.locator('//*[contains(@aria-label,"Price of base")]')
        self.chart_root = page.locator('//*[@class="highcharts-root"]')
        self.chart_loader = page.locator('//div[@class="v-loader__item"]')

    def page_number_link(self, number):
        return self.page.locator(f'//a[contains(@class, "page-number") and text()="{number}"]')

    # --- Navigation ---

    async def navigate_to_ftse100(self):
        await expect(self.quick_link_ftse).to_be_visible()
        await self.quick_link_ftse.click()
        await self.page.wait_for_load_state('networkidle')
        await expect(self.page).to_have_url(re.compile(r'.*ftse-100'))

    async def navigate_to_constituents(self):
        await expect(self.constituents_link).to_be_visible()
        await self.constituents_link.click()
        await self.page.wait_for_load_state('networkidle')
        await expect(self.page).to_have_url(re.compile(r'.*ftse-100/constituents.*'))

    # --- Sorting ---

    async def percentage_change_header_class(self):
        await expect(self.index_table).to_be_visible()
        return await self.percentage_change_header.get_attribute('class')

    async def sort_percentage_change(self, descending=True):
        option = self.high_to_low if descending else self.low_to_high
        await expect(self.percentage_change_header).to_be_visible()
        await self.percentage_change_header.click()
        await expect(option).to_be_visible()
        await option.click()
        await self.page.wait_for_load_state('networkidle')

    async def sort_market_cap_high_to_low(self):
        await expect(self.market_cap_header).to_be_visible()
        await self.market_cap_header.click()
        await expect(self.high_to_low).to_be_visible()
        await self.high_to_low.click()
        await self.page.wait_for_load_state('networkidle')

    # --- Chart controls ---

    async def enter_from_date_year(self, year):
        await expect(self.from_year_input).to_be_visible()
        await self.from_year_input.fill(str(year))
        await self.from_year_input.press('Enter')
        await expect(self.chart_loader.first).to_be_hidden()
        await expect(self.chart_root).to_be_visible()

    async def select_periodicity(self, option_text):
        await expect(self.periodicity_dropdown).to_be_visible()
        await self.periodicity_dropdown.click()
        option = self.page.locator(f'//div[contains(text(),"{option_text}")]')
        await expect(option).to_be_visible()
        await option.click()
        await self.page.wait_for_load_state('networkidle')

    # --- Page Provider ---

    async def current_page_row_texts(self):
        await self.page.wait_for_load_state('networkidle')
        try:
            await self.table_rows.first.wait_for(state='visible', timeout=15000)
        except PlaywrightTimeoutError:
            return []
        rows = await self.table_rows.evaluate_all(ROW_TEXTS_JS)
        return [tuple(r) for r in rows]

    async def has_next_page(self, page_index):
        link = self.page_number_link(page_index + 1)
        return await link.is_visible() and await link.is_enabled()

    async def first_row_text(self):
        return (await self.table_rows.first.text_content() or '').strip()

    async def go_to_next_page(self, page_index):
        """Clicks page `page_index + 1`. True only once the table shows different rows."""
        try:
            before = await self.first_row_text()
            await self.page_number_link(page_index + 1).click()
            await self.page.wait_for_load_state('networkidle')
            await self.page.wait_for_function(FIRST_ROW_CHANGED_JS, arg=[ROWS_SELECTOR, before], timeout=15000)
            if await self.first_row_text() == before:
                print(f"   ❌ Pagination Error: page {page_index + 1} did not load.")
                return False
            return True
        except PlaywrightError as e:
            print(f"   ❌ Pagination Error: {e}")
            return False

    async def current_chart_labels(self):
        await self.chart_loader.first.wait_for(state='hidden')
        return await self.chart_points.evaluate_all(ARIA_LABELS_JS)
