"""Service layer for the Game Pass API."""
