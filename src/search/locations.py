"""
Location normalization used when broadening searches
"""

import re
from dataclasses import dataclass
from typing import Optional

US_STATES = {
    "al": "Alabama", "ak": "Alaska", "az": "Arizona", "ar": "Arkansas", "ca": "California",
    "co": "Colorado", "ct": "Connecticut", "de": "Delaware", "fl": "Florida", "ga": "Georgia",
    "hi": "Hawaii", "id": "Idaho", "il": "Illinois", "in": "Indiana", "ia": "Iowa",
    "ks": "Kansas", "ky": "Kentucky", "la": "Louisiana", "me": "Maine", "md": "Maryland",
    "ma": "Massachusetts", "mi": "Michigan", "mn": "Minnesota", "ms": "Mississippi", "mo": "Missouri",
    "mt": "Montana", "ne": "Nebraska", "nv": "Nevada", "nh": "New Hampshire", "nj": "New Jersey",
    "nm": "New Mexico", "ny": "New York", "nc": "North Carolina", "nd": "North Dakota", "oh": "Ohio",
    "ok": "Oklahoma", "or": "Oregon", "pa": "Pennsylvania", "ri": "Rhode Island", "sc": "South Carolina",
    "sd": "South Dakota", "tn": "Tennessee", "tx": "Texas", "ut": "Utah", "vt": "Vermont",
    "va": "Virginia", "wa": "Washington", "wv": "West Virginia", "wi": "Wisconsin", "wy": "Wyoming",
    "dc": "District of Columbia",
}

STATE_NAMES = {name.lower(): name for name in US_STATES.values()}

MAJOR_US_CITIES = {
    "new york": "New York",
    "new york city": "New York",
    "nyc": "New York",
    "brooklyn": "New York",
    "buffalo": "New York",
    "los angeles": "California",
    "san francisco": "California",
    "sf": "California",
    "san diego": "California",
    "san jose": "California",
    "oakland": "California",
    "sacramento": "California",
    "irvine": "California",
    "palo alto": "California",
    "silicon valley": "California",
    "chicago": "Illinois",
    "houston": "Texas",
    "dallas": "Texas",
    "austin": "Texas",
    "san antonio": "Texas",
    "fort worth": "Texas",
    "plano": "Texas",
    "el paso": "Texas",
    "phoenix": "Arizona",
    "scottsdale": "Arizona",
    "tucson": "Arizona",
    "philadelphia": "Pennsylvania",
    "pittsburgh": "Pennsylvania",
    "jacksonville": "Florida",
    "miami": "Florida",
    "tampa": "Florida",
    "orlando": "Florida",
    "columbus": "Ohio",
    "cleveland": "Ohio",
    "cincinnati": "Ohio",
    "charlotte": "North Carolina",
    "raleigh": "North Carolina",
    "durham": "North Carolina",
    "indianapolis": "Indiana",
    "seattle": "Washington",
    "denver": "Colorado",
    "boulder": "Colorado",
    "boston": "Massachusetts",
    "cambridge": "Massachusetts",
    "nashville": "Tennessee",
    "memphis": "Tennessee",
    "detroit": "Michigan",
    "portland": "Oregon",
    "las vegas": "Nevada",
    "reno": "Nevada",
    "baltimore": "Maryland",
    "milwaukee": "Wisconsin",
    "madison": "Wisconsin",
    "atlanta": "Georgia",
    "kansas city": "Missouri",
    "st louis": "Missouri",
    "minneapolis": "Minnesota",
    "new orleans": "Louisiana",
    "salt lake city": "Utah",
    "boise": "Idaho",
    "richmond": "Virginia",
    "newark": "New Jersey",
    "jersey city": "New Jersey",
    "honolulu": "Hawaii",
    "anchorage": "Alaska",
}

COUNTRY_ALIASES = {
    "usa": "United States",
    "us": "United States",
    "u.s.": "United States",
    "america": "United States",
    "united states": "United States",
    "united states of america": "United States",
    "uk": "United Kingdom",
    "great britain": "United Kingdom",
    "england": "United Kingdom",
}

NATIONWIDE = "United States"


@dataclass
class NormalizedLocation:
    original: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


def normalize_location(value: str) -> NormalizedLocation:
    """Split a free-text US location into city, state and country where known"""
    original = value.strip()
    text = re.sub(r"\.", "", original.lower()).strip()

    if text in COUNTRY_ALIASES:
        return NormalizedLocation(original=original, country=COUNTRY_ALIASES[text])
    if text in US_STATES:
        return NormalizedLocation(original=original, state=US_STATES[text], country=NATIONWIDE)
    if text in STATE_NAMES:
        return NormalizedLocation(original=original, state=STATE_NAMES[text], country=NATIONWIDE)
    if text in MAJOR_US_CITIES:
        return NormalizedLocation(
            original=original, city=original.title(), state=MAJOR_US_CITIES[text], country=NATIONWIDE
        )

    # "Austin, TX" / "Austin, Texas, United States"
    parts = [part.strip() for part in text.split(",") if part.strip()]
    if len(parts) >= 2 and COUNTRY_ALIASES.get(parts[-1]) == NATIONWIDE:
        parts = parts[:-1]
    if len(parts) >= 2:
        state = US_STATES.get(parts[-1]) or STATE_NAMES.get(parts[-1])
        if state:
            city = ", ".join(parts[:-1]).title()
            return NormalizedLocation(original=original, city=city, state=state, country=NATIONWIDE)
    if len(parts) == 1 and parts[0] != text:
        return normalize_location(parts[0])

    return NormalizedLocation(original=original)


def broaden_to_state(value: str) -> Optional[str]:
    """State name for a city-level US location, or None"""
    location = normalize_location(value)
    if location.city and location.state:
        return location.state
    return None


def is_us_subnational(value: str) -> bool:
    """True for US city or state locations"""
    location = normalize_location(value)
    return location.state is not None
