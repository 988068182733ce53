"""HTTP API for content generation, parsing, export and images."""
