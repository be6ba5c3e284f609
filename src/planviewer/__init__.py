"""Electrical plan viewer with viewport transform and rectangle route selection."""
