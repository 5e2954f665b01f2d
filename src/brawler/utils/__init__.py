"""General utility helpers for brawler."""
