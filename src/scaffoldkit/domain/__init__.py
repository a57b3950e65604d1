"""Domain model for scaffold templates and projects."""
