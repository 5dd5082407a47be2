"""SQL Renderer module."""
