"""deadwood - unused declaration finder for TypeScript/JavaScript projects."""
from .config import __version__

__all__ = ["__version__"]
