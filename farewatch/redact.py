"""
Masking for values that identify a traveler.

Record locators, names and ticket numbers never reach the log in full.
"""


def mask(value, keep=2):
    """Mask all but the first `keep` characters: 'GO7RLB' -> 'GO****'."""
    if value is None:
        return None
    value = str(value)
    if len(value) <= keep:
        return '*' * len(value)
    return value[:keep] + '*' * (len(value) - keep)


def mask_name(first, last):
    """Initials only: ('John', 'Smith') -> 'J. S.'"""
    parts = [f"{part[0]}." for part in (first, last) if part]
    return ' '.join(parts) if parts else None
