"""Feature modules for SphereGrid (progression, session guarding, shared foundations)."""
