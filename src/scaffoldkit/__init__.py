"""scaffoldkit: project and component scaffolding from registry templates."""

__version__ = "0.3.1"

__all__ = ["__version__"]
