"""luaudoc: Luau doc-comment extraction and reference page rendering."""

__version__ = "0.1.0"

__all__ = ["__version__"]
