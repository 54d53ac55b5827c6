"""HTTP API for the anniversary site."""
