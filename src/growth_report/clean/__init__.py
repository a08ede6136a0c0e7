"""Cleaning utilities for the report pipeline.

Provides total parsers for localized dates, money, rates and counts, and the
lead validity classifier used by every acquisition pipeline.
"""
