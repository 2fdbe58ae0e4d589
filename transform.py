import re
from dataclasses import dataclass
from datetime import datetime

import pandas as pd
import pytz

LONDON = pytz.timezone('Europe/London')

# Longest leading decimal, read the way a browser's parseFloat reads it
LEADING_NUMBER = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
PRICE_PHRASE = re.compile(r'is\s+([\d\s,]+)')
FULL_DATE = re.compile(r'(\d{1,2} [A-Za-z]+ \d{4})')
LEADING_DAY = re.compile(r'^\d{1,2} ')


@dataclass(frozen=True)
class ConstituentRecord:
    name: str
    percentage_change: float = 0.0
    market_cap: float = 0.0

    @property
    def is_valid(self):
        return bool(self.name)

    def to_dict(self):
        return {
            "name": self.name,
            "percentageChange": self.percentage_change,
            "marketCap": self.market_cap,
        }


@dataclass(frozen=True)
class PriceObservation:
    price: float
    period_label: str

    def to_dict(self):
        return {"price": self.price, "monthYear": self.period_label}


def get_london_time():
    return datetime.now(LONDON).strftime("%Y-%m-%d %H:%M:%S")


def parse_number(text):
    """Lenient float parse. Returns None when no leading number is present."""
    match = LEADING_NUMBER.match(str(text or '').strip())
    if not match:
        return None
    return float(match.group(0))


def clean_numeric_text(text):
    """Drops thousands separators: '1,234.5' -> '1234.5'"""
    return str(text or '').strip().replace(',', '')


def parse_constituent_row(name_text, percent_text, market_cap_text, unit_multiplier=1):
    """
    Builds a ConstituentRecord from raw table cell text.
    Unparseable numbers fall back to 0 instead of failing the row.
    """
    percentage_change = parse_number(clean_numeric_text(percent_text))
    market_cap = parse_number(clean_numeric_text(market_cap_text))

    return ConstituentRecord(
        name=str(name_text or '').strip(),
        percentage_change=percentage_change if percentage_change is not None else 0.0,
        market_cap=(market_cap * unit_multiplier) if market_cap is not None else 0.0,
    )


def extract_top_n(rows, n, unit_multiplier=1):
    """First n rows in the order given. Sorting is the table's job, not ours."""
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    return [parse_constituent_row(*row, unit_multiplier=unit_multiplier) for row in list(rows)[:n]]


def parse_price_observation(label):
    """
    Parses a chart aria-label such as
    'The FTSE 100 value is 7 123,45 on 15 March 2022'.
    Returns None unless both price and month parse.
    """
    text = str(label or '')

    price_match = PRICE_PHRASE.search(text)
    if not price_match:
        return None
    price = parse_number(re.sub(r'\s', '', price_match.group(1)).replace(',', '.', 1))
    if price is None:
        return None

    date_match = FULL_DATE.search(text)
    if not date_match:
        return None
    period_label = LEADING_DAY.sub('', date_match.group(1))

    return PriceObservation(price=price, period_label=period_label)


def parse_price_observations(labels):
    observations = []
    for label in labels:
        obs = parse_price_observation(label)
        if obs is not None:
            observations.append(obs)
    return observations


def lowest_price_observation(observations):
    lowest = None
    for obs in observations:
        if lowest is None or obs.price < lowest.price:
            lowest = obs
    return lowest


def records_to_frame(records):
    """Records -> DataFrame keyed by the serialised field names"""
    rows = [r.to_dict() for r in records]
    if not rows:
        return pd.DataFrame(columns=["name", "percentageChange", "marketCap"])
    return pd.DataFrame(rows)
