"""Block-based page builder: template kernel plus FastAPI backend."""

__version__ = "0.1.0"
