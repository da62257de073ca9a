"""Utilities for turning daily ADS-B position traces into flight summaries.

This package provides modular building blocks to load per-day trace JSON files,
label ground/air samples, segment flights on takeoff transitions, summarise and
classify each segment's endpoints, and render the flight summary report.
"""
