"""Configuration store, ticket catalog and quote archive."""
