"""Utility modules for fluentql."""
