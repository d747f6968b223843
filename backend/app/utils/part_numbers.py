"""
Part number normalization.

Scanned labels carry part numbers from two numbering schemes. Legacy labels
prefix a "P" (sometimes doubled by the label printer) in front of numbers that
the lookup table stores without it. normalize_part_number() maps a raw scan to
the key the table is searched with.
"""


def normalize_part_number(raw: str) -> str:
    """
    Map a raw scanned/typed part number to its lookup key.

    - "PP..." -> drop the first "P"      ("PP123" -> "P123")
    - "P4..." -> drop the "P"            ("P4123" -> "4123")
    - "P0..." -> unchanged
    - "P?..." -> unchanged
    - anything else -> unchanged
    """
    if raw.startswith("PP"):
        return raw[1:]

    if raw.startswith("P") and len(raw) > 1:
        second = raw[1]
        if second == "4":
            return raw[1:]
        elif second == "0":
            # P0 numbers are stored with their prefix
            return raw
        else:
            return raw

    return raw
