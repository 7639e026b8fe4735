"""API package for Market Pulse Dashboard."""
