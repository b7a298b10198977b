"""gitas-installer: fetch, place and expose the prebuilt gitas binary."""

__version__ = "0.1.0"
