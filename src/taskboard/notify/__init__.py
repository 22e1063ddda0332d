"""Live connections: user -> connection registry and event fanout."""
