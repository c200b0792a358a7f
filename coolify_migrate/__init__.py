"""Migrate a Coolify host (state, Docker volumes, SSH keys) to a new server."""

__version__ = "0.1.0"
