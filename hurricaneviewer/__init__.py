"""hurricaneviewer – Earth Engine hurricane maps, animations and charts."""

__version__ = "0.1.0"
