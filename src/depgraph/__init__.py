"""depgraph - resolve npm package requests into a pinned dependency graph."""

__version__ = "0.1.0"
