"""
Ferry crossing simulation - a two-sided crossing served by one ferry,
with toll booths on each side.
"""

__version__ = "0.1.0"
