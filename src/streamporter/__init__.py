"""Spotlightr -> Cloudflare Stream migration tool."""

__version__ = "1.0.0"
