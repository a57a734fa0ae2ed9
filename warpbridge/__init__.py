"""Top-level package for warp-route token transfer utilities."""

from importlib import metadata


def __getattr__(name: str) -> str:
    """Expose the package version via ``warpbridge.__version__``."""
    if name == "__version__":
        try:
            return metadata.version("warpbridge")
        except metadata.PackageNotFoundError:
            return "0.0.0"
    raise AttributeError(name)


__all__ = ["__version__"]
