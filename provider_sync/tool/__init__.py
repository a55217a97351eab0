"""Command line tools for provider-sync."""
