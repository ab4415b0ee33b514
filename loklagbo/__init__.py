"""Client-side identity layer for the LokLagbo marketplace demo."""
