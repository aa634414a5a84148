"""Interactive forms built on the service layer."""
