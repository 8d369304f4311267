"""HTTP and WebSocket surface of League Live."""
