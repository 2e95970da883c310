"""Route modules for the HybridRec API."""
