"""Command-line interface for scaffoldkit."""
