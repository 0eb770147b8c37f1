"""Collaborators used by the dispatcher and the actions."""
