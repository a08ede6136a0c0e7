"""CSV ingestion.

Reads the four exports (users, transactions, email campaigns, lead scoring)
and maps their loosely named headers onto typed raw records.
"""
