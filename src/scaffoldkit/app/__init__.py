"""Application services for the scaffold pipeline."""
