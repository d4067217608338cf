"""Quality & Standardization Engine.

Four-dimension quality scoring (completeness, accuracy, consistency,
timeliness) for every entity collection, record standardization,
duplicate detection, and per-source snapshots aggregated into a dashboard.
"""
