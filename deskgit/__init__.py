"""Progress parsing and working-directory state reconciliation for a desktop git client."""

__version__ = "0.1.0"
