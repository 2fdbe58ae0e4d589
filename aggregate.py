from enum import Enum
from typing import Protocol

from transform import parse_constituent_row, parse_price_observations


class PageProvider(Protocol):
    """
    What the aggregator needs from a paginated listing.
    Every call must only return once the rendered page has settled.
    """

    async def current_page_row_texts(self): ...

    async def has_next_page(self, page_index): ...

    async def go_to_next_page(self, page_index): ...

    async def current_chart_labels(self): ...


class State(Enum):
    READING_PAGE = "reading_page"
    FILTERING = "filtering"
    CHECKING_NEXT_PAGE = "checking_next_page"
    DONE = "done"


async def collect_exceeding_threshold(provider: PageProvider, threshold, unit_multiplier=1):
    """
    Walks every page the provider offers and keeps rows whose market cap is
    strictly greater than `threshold` (after applying `unit_multiplier`).

    Traversal ends on an empty page, on the last page, or when the provider
    cannot confirm a page change. The last case keeps what was collected so far.
    There is no page cap: a provider that always reports a next page never ends.
    """
    collected = []
    page_index = 1
    rows = []
    state = State.READING_PAGE

    while state is not State.DONE:
        if state is State.READING_PAGE:
            rows = await provider.current_page_row_texts()
            state = State.FILTERING if rows else State.DONE

        elif state is State.FILTERING:
            records = [parse_constituent_row(*row, unit_multiplier=unit_multiplier) for row in rows]
            above = [r for r in records if r.market_cap > threshold]
            print(f"   -> Page {page_index}: {len(above)} of {len(records)} constituents above threshold.")
            collected.extend(above)
            state = State.CHECKING_NEXT_PAGE

        elif state is State.CHECKING_NEXT_PAGE:
            if not await provider.has_next_page(page_index):
                state = State.DONE
            elif await provider.go_to_next_page(page_index):
                page_index += 1
                state = State.READING_PAGE
            else:
                print(f"   ⚠️ Could not confirm move to page {page_index + 1}. Stopping with {len(collected)} rows.")
                state = State.DONE

    return collected


async def collect_price_observations(provider: PageProvider):
    labels = await provider.current_chart_labels()
    observations = parse_price_observations(labels)
    print(f"   -> Parsed {len(observations)} of {len(labels)} chart points.")
    return observations
