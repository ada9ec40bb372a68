"""Humans CRM API."""
