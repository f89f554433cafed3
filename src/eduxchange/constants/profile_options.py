"""Choices offered by the profile form."""

from __future__ import annotations

# (stored value, display label)
YEAR_OF_STUDY_OPTIONS: tuple[tuple[str, str], ...] = (
    ("1st Year", "1st Year"),
    ("2nd Year", "2nd Year"),
    ("3rd Year", "3rd Year"),
    ("4th Year", "4th Year"),
    ("5th Year", "5th Year"),
    ("Graduate", "Graduate Student"),
    ("PhD", "PhD Student"),
    ("Faculty", "Faculty"),
    ("Alumni", "Alumni"),
)
