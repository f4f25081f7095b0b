"""
Section-derivation rule table.

Maps a free-text website idea to the ordered list of page sections the
generator proposes for it. The backend uses it to compute the stored
sections and the client uses the very same table for its optimistic guess,
so both always agree.
"""
from __future__ import annotations

from typing import List, Tuple

# (keywords, template); the first rule with a keyword contained in the idea wins
SECTION_RULES: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...]], ...] = (
    (
        ("bakery",),
        ("Hero - Fresh Baked Goods", "Our Story", "Menu", "Location & Hours"),
    ),
    (
        ("restaurant",),
        ("Hero - Fine Dining", "About Chef", "Menu", "Reservations"),
    ),
    (
        ("shop", "store"),
        (
            "Hero - Featured Products",
            "Product Catalog",
            "Special Offers",
            "Customer Reviews",
            "Contact",
        ),
    ),
    (
        ("portfolio",),
        ("Hero - Introduction", "Projects", "Skills", "Testimonials", "Contact"),
    ),
)

DEFAULT_SECTIONS: Tuple[str, ...] = (
    "Hero",
    "About",
    "Services",
    "Testimonials",
    "Contact",
)


def normalize_idea(idea_text: str) -> str:
    """Cache/lookup key for an idea: trimmed and lowercased."""
    return idea_text.strip().lower()


def derive_sections(idea_text: str) -> List[str]:
    """
    Return the section template for *idea_text*.

    Matching is a case-insensitive substring test against ``SECTION_RULES``
    in order; ``DEFAULT_SECTIONS`` applies when nothing matches. A new list
    is returned on every call so callers may mutate it freely.
    """
    lowered = idea_text.lower()
    for keywords, template in SECTION_RULES:
        if any(keyword in lowered for keyword in keywords):
            return list(template)
    return list(DEFAULT_SECTIONS)
