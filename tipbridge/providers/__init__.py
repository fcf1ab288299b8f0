"""External service clients (aggregator, RPC nodes, backend)."""
