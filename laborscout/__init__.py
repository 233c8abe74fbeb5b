"""
Labor Scout - Location-Aware Job Matching

Geocodes addresses, resolves the caller's position, and searches open job
listings by text, category and distance, with a list fallback when no
mapping provider is configured.
"""

__version__ = "1.0.0"
__author__ = "Labor Scout"
