"""cxxrag — structural chunking and vector indexing for C and C++ sources."""

__version__ = "0.1.0"
