"""HTTP surface for the shiritori game."""
