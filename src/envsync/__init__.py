"""envsync - reconcile local dotenv files with remote environment variables."""

from envsync.__version__ import __version__

__all__ = ["__version__"]
