"""Import and summarise Welsh government statistics by local authority."""

__version__ = "0.1.0"

__all__ = ["__version__"]
