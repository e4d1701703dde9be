"""cigraph: resolve CI project definitions into task/variant graphs and task ids."""

from cigraph.config import VERSION as __version__

__all__ = ["__version__"]
