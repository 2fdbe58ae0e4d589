import asyncio
import os
import traceback
from datetime import datetime

from playwright.async_api import async_playwright

from extract import HOME_URL, HomePage, FTSE100Page, open_page
from transform import LONDON, extract_top_n, lowest_price_observation, records_to_frame
from aggregate import collect_exceeding_threshold, collect_price_observations
from load import write_records, write_observation

# ==========================================
#              CONFIGURATION
# ==========================================
URL = HOME_URL
OUTPUT_DIR = os.environ.get('OUTPUT_DIR', '.')
HEADLESS = os.environ.get('HEADLESS', '1') != '0'

TOP_N = 10
MARKET_CAP_THRESHOLD = 7_000_000      # Absolute currency units
MARKET_CAP_MULTIPLIER = 1_000_000     # Table reports "Market cap (m)"
YEARS_BACK = 3
PERIODICITY = "Monthly"

RISERS_FILE = "highestTop10Constituents.json"
FALLERS_FILE = "lowestTop10Constituents.json"
MARKET_CAP_FILE = "constituentsWithMarketCap.json"
LOWEST_MONTH_FILE = "lowestMonthlyIndexValue.json"

# Header class when the table is already sorted highest first
SORTED_DESC_CLASS = "indented clickable"


def out_path(name):
    return os.path.join(OUTPUT_DIR, name)


def from_year(years_back=YEARS_BACK):
    return datetime.now(LONDON).year - years_back


# ==========================================
#               SCRAPE JOBS
# ==========================================

async def open_ftse100(page):
    home = HomePage(page)
    await home.goto(URL)
    if not await home.title_ok():
        print("   ⚠️ Homepage title or header did not match.")
    ftse = FTSE100Page(page)
    await ftse.navigate_to_ftse100()
    return ftse


async def top_risers(page):
    print("2. [TRANSFORM] Top risers by percentage change...")
    ftse = await open_ftse100(page)
    await ftse.navigate_to_constituents()
    if await ftse.percentage_change_header_class() != SORTED_DESC_CLASS:
        await ftse.sort_percentage_change(descending=True)
    records = extract_top_n(await ftse.current_page_row_texts(), TOP_N)
    print(records_to_frame(records).to_string(index=False))
    return write_records(records, out_path(RISERS_FILE))


async def top_fallers(page):
    print("2. [TRANSFORM] Top fallers by percentage change...")
    ftse = await open_ftse100(page)
    await ftse.navigate_to_constituents()
    await ftse.sort_percentage_change(descending=False)
    records = extract_top_n(await ftse.current_page_row_texts(), TOP_N)
    print(records_to_frame(records).to_string(index=False))
    return write_records(records, out_path(FALLERS_FILE))


async def market_cap_above_threshold(page):
    print(f"2. [TRANSFORM] Constituents with market cap above {MARKET_CAP_THRESHOLD:,}...")
    ftse = await open_ftse100(page)
    await ftse.navigate_to_constituents()
    await ftse.sort_market_cap_high_to_low()
    records = await collect_exceeding_threshold(ftse, MARKET_CAP_THRESHOLD, MARKET_CAP_MULTIPLIER)
    print(f"   -> {len(records)} constituents collected.")
    return write_records(records, out_path(MARKET_CAP_FILE))


async def lowest_monthly_index(page):
    print(f"2. [TRANSFORM] Lowest {PERIODICITY.lower()} index value since {from_year()}...")
    ftse = await open_ftse100(page)
    await ftse.enter_from_date_year(from_year())
    await ftse.select_periodicity(PERIODICITY)
    lowest = lowest_price_observation(await collect_price_observations(ftse))
    if lowest:
        print(f"   -> Lowest index value: {lowest.price} in {lowest.period_label}")
    else:
        print("   -> No valid index values found.")
    return write_observation(lowest, out_path(LOWEST_MONTH_FILE))


JOBS = [top_risers, top_fallers, market_cap_above_threshold, lowest_monthly_index]


# ==========================================
#           MAIN PIPELINE
# ==========================================

async def run_bot(jobs=JOBS):
    print("🚀 Starting FTSE-100 Logger...")
    written = []

    async with async_playwright() as p:
        browser, page = await open_page(p, headless=HEADLESS)
        try:
            for job in jobs:
                try:
                    written.append(await job(page))
                except Exception as e:
                    print(f"   ❌ {job.__name__} Error: {e}")
                    traceback.print_exc()
        finally:
            await browser.close()

    print(f"3. [LOAD] {len(written)} of {len(jobs)} files written.")
    print("✅ DONE!")
    return written


if __name__ == "__main__":
    asyncio.run(run_bot())
