"""oracle-dashboard — Bet history, ENS identities and player stats for the oracle game."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("oracle-dashboard")
except PackageNotFoundError:
    __version__ = "0.0.0"
