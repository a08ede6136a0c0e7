"""Aggregation pipelines.

This package contains the pure functions that turn raw records plus a set of
comparison periods into metric tables (acquisition, channels, entity
heatmaps, conversion cohorts, email KPIs and lead scoring). Each pipeline is
recomputed from scratch on every call and never raises on bad data.
"""
