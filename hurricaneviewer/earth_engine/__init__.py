"""Earth Engine session handling and error translation."""
