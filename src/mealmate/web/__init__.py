"""HTTP interface for recipe import."""
