"""Request authorization guards."""
