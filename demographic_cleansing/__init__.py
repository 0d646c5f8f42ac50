"""
Demographic cleansing - staged pipeline for standardizing sex, race and age fields.

This package converts free-text demographic values into a fixed vocabulary:
  cleanse → finalize

Values that are already canonical pass through without calling the
classification service. Every stage is re-runnable and produces auditable logs.
"""

__version__ = "1.0.0"
