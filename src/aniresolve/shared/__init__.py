"""Shared utilities, constants and models for AniResolve."""
