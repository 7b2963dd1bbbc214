"""Content and booking backend for the Riad di Siena website."""
