"""Application layer: ports and use cases of the emission fabric."""
