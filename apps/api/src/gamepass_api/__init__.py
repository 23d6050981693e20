"""Game Pass engine service."""
