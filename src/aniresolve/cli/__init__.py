"""Command line interface for AniResolve."""
