"""Ingestion helpers.

Defensive parsing shared by the owner-API models.
"""
