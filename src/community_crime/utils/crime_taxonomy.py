"""Utility helpers for grouping community crime categories into higher-level groups."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple


# Categories as published in the community crime & disorder statistics.
CATEGORY_GROUP_MAP: Dict[str, str] = {
    # Violent crime
    "ASSAULT": "Violent",
    "ASSAULT (NON-DOMESTIC)": "Violent",
    "VIOLENCE OTHER (NON-DOMESTIC)": "Violent",
    "COMMERCIAL ROBBERY": "Violent",
    "STREET ROBBERY": "Violent",
    "ROBBERY": "Violent",
    "HOMICIDE": "Violent",

    # Property crime
    "BREAK & ENTER - COMMERCIAL": "Property",
    "BREAK & ENTER - DWELLING": "Property",
    "BREAK & ENTER - OTHER PREMISES": "Property",
    "THEFT FROM VEHICLE": "Property",
    "THEFT OF VEHICLE": "Property",
    "THEFT": "Property",
    "BURGLARY": "Property",

    # Quality-of-life / disorder
    "SOCIAL DISORDER": "Disorder",
    "PHYSICAL DISORDER": "Disorder",
}


# Legend order for group-level charts
GROUP_ORDER: Tuple[str, ...] = ("Violent", "Property", "Disorder", "Unclassified")


def categorize_category(category: Optional[str]) -> str:
    """Map a raw crime Category to a broader analytical group."""
    if not category:
        return "Unclassified"
    key = " ".join(str(category).upper().split())
    return CATEGORY_GROUP_MAP.get(key, "Unclassified")


def expand_groups(categories: Iterable[str]) -> Dict[str, Tuple[str, ...]]:
    """Categories seen in the crime table under each group.

    Groups follow GROUP_ORDER and only appear when they have a category;
    categories keep the order the crime table lists them in.
    """
    members: Dict[str, List[str]] = {group: [] for group in GROUP_ORDER}
    for category in dict.fromkeys(categories):
        members[categorize_category(category)].append(category)
    return {group: tuple(names) for group, names in members.items() if names}


__all__ = ["categorize_category", "expand_groups", "CATEGORY_GROUP_MAP", "GROUP_ORDER"]
