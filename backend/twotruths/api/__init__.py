"""HTTP transport for frame interactions."""
