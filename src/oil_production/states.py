# file: src/oil_production/states.py
from __future__ import annotations

from typing import NamedTuple


class StateInfo(NamedTuple):
    """State metadata used for EIA lookups and display."""
    name: str
    region: str  # PADD district


STATES: dict[str, StateInfo] = {
    "AK": StateInfo(name="Alaska", region="PADD 5"),
    "AL": StateInfo(name="Alabama", region="PADD 3"),
    "AR": StateInfo(name="Arkansas", region="PADD 3"),
    "AZ": StateInfo(name="Arizona", region="PADD 5"),
    "CA": StateInfo(name="California", region="PADD 5"),
    "CO": StateInfo(name="Colorado", region="PADD 4"),
    "CT": StateInfo(name="Connecticut", region="PADD 1"),
    "DE": StateInfo(name="Delaware", region="PADD 1"),
    "FL": StateInfo(name="Florida", region="PADD 1"),
    "GA": StateInfo(name="Georgia", region="PADD 1"),
    "HI": StateInfo(name="Hawaii", region="PADD 5"),
    "IA": StateInfo(name="Iowa", region="PADD 2"),
    "ID": StateInfo(name="Idaho", region="PADD 4"),
    "IL": StateInfo(name="Illinois", region="PADD 2"),
    "IN": StateInfo(name="Indiana", region="PADD 2"),
    "KS": StateInfo(name="Kansas", region="PADD 2"),
    "KY": StateInfo(name="Kentucky", region="PADD 2"),
    "LA": StateInfo(name="Louisiana", region="PADD 3"),
    "MA": StateInfo(name="Massachusetts", region="PADD 1"),
    "MD": StateInfo(name="Maryland", region="PADD 1"),
    "ME": StateInfo(name="Maine", region="PADD 1"),
    "MI": StateInfo(name="Michigan", region="PADD 2"),
    "MN": StateInfo(name="Minnesota", region="PADD 2"),
    "MO": StateInfo(name="Missouri", region="PADD 2"),
    "MS": StateInfo(name="Mississippi", region="PADD 3"),
    "MT": StateInfo(name="Montana", region="PADD 4"),
    "NC": StateInfo(name="North Carolina", region="PADD 1"),
    "ND": StateInfo(name="North Dakota", region="PADD 2"),
    "NE": StateInfo(name="Nebraska", region="PADD 2"),
    "NH": StateInfo(name="New Hampshire", region="PADD 1"),
    "NJ": StateInfo(name="New Jersey", region="PADD 1"),
    "NM": StateInfo(name="New Mexico", region="PADD 3"),
    "NV": StateInfo(name="Nevada", region="PADD 5"),
    "NY": StateInfo(name="New York", region="PADD 1"),
    "OH": StateInfo(name="Ohio", region="PADD 2"),
    "OK": StateInfo(name="Oklahoma", region="PADD 2"),
    "OR": StateInfo(name="Oregon", region="PADD 5"),
    "PA": StateInfo(name="Pennsylvania", region="PADD 1"),
    "RI": StateInfo(name="Rhode Island", region="PADD 1"),
    "SC": StateInfo(name="South Carolina", region="PADD 1"),
    "SD": StateInfo(name="South Dakota", region="PADD 2"),
    "TN": StateInfo(name="Tennessee", region="PADD 2"),
    "TX": StateInfo(name="Texas", region="PADD 3"),
    "UT": StateInfo(name="Utah", region="PADD 4"),
    "VA": StateInfo(name="Virginia", region="PADD 1"),
    "VT": StateInfo(name="Vermont", region="PADD 1"),
    "WA": StateInfo(name="Washington", region="PADD 5"),
    "WI": StateInfo(name="Wisconsin", region="PADD 2"),
    "WV": StateInfo(name="West Virginia", region="PADD 1"),
    "WY": StateInfo(name="Wyoming", region="PADD 4"),
}


def list_states() -> list[str]:
    return sorted(STATES.keys())


def get_state_info(state_code: str) -> StateInfo:
    return STATES[state_code]


def get_state_name(state_code: str) -> str:
    return STATES[state_code].name


def validate_state(state_code: str) -> bool:
    return state_code in STATES


def parse_state_list(raw: str) -> list[str]:
    """Parse a comma-separated list like "tx, nd,NM" into upper-case codes."""
    return [s.strip().upper() for s in raw.split(",") if s.strip()]
