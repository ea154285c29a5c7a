"""Workflow error monitor: ingestion, listing and analytics of n8n workflow errors."""

__version__ = "0.1.0"
