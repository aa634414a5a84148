"""Rematch Engine — buyer profiles and AI qualification prompt settings."""
