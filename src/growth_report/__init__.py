"""growth_report package.

Contains modules for ingesting signup, transaction, email-campaign and
lead-scoring CSV exports, parsing their localized fields, and building
period-over-period growth metrics for an external dashboard.

Architecture:
- Raw CSV rows -> typed raw records (pydantic)
- Parsers + validity classifier turn raw fields into typed values
- Aggregation pipelines compute immutable metric tables per period window
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
