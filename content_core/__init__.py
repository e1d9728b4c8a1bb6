"""Request-scoped content fetching and page rendering core."""
