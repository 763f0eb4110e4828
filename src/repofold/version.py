"""Version of the running repofold, preferring installed distribution metadata."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata, resources

_DISTRIBUTION = "repofold"
_VERSION_FILENAME = "VERSION"


def _bundled_version() -> str:
    try:
        return resources.files(_DISTRIBUTION).joinpath(_VERSION_FILENAME).read_text(encoding="utf-8").strip()
    except (FileNotFoundError, ModuleNotFoundError):
        return "unknown"


@lru_cache(maxsize=1)
def get_version() -> str:
    """
    Return the version reported by ``repofold version``.

    An installed (or editable) distribution answers from its metadata; a
    source checkout run without installation falls back to the bundled
    ``VERSION`` file.
    """
    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return _bundled_version()


__all__ = ["get_version", "__version__"]

__version__ = get_version()
