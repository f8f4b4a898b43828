"""Clients for source-code hosting APIs."""
