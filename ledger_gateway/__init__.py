"""GraphQL gateway over a ledger JSON-RPC fullnode."""

__version__ = "0.1.0"
