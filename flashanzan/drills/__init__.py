"""Drill content generators."""
