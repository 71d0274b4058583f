"""Shared data models used by both core and services."""
