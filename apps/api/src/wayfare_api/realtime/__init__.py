"""Active-search tracking, periodic refresh and update fan-out."""
