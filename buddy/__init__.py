"""Club fee ledger of the Buddy System."""

__version__ = "0.1.0"
