"""PawScript clinic portal backend."""
