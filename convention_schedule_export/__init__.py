"""Export a convention schedule grid (merged-cell HTML table) to ICS / CSV / JSON."""

__version__ = "0.1.0"
