"""Orchestration layer and terminal front end."""
