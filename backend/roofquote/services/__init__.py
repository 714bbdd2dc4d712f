"""Quote generation services."""
