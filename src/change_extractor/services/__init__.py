"""Core services: history resolution, diff aggregation and path classification."""
