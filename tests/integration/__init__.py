"""Integration tests that drive real source-control binaries."""
