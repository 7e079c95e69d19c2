"""beadlink - correlate git history with a beads issue ledger."""

__version__ = "0.1.0"
