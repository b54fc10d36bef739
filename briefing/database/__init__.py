"""Persistence for the API configuration store and the feed cache."""
