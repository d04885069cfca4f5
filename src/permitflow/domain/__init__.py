"""Domain layer - enums, command types and ports (no persistence)."""
