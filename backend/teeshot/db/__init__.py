"""MongoDB access (GridFS image assets)."""
