"""Packaged resources for scaffoldkit."""
