"""Console helpers for the fare interpreter: logging setup and verdict rendering."""
