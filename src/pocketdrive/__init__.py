# pocketdrive: storage-agnostic file manager service.
# Created: 2026-10-16

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pocketdrive")
except PackageNotFoundError:
    __version__ = "0.0.0"
