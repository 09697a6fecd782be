"""linkgraph - build, lay out and analyze the link graph of a note vault."""

__version__ = "0.1.0"
