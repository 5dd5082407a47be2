"""Query building: plain SELECT builder and recursive traversal expressions."""
