"""Ports for the collaborators of the scaffold pipeline."""
