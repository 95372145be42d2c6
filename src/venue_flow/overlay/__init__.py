"""Map overlay projection (marker radii, flow lines)."""
