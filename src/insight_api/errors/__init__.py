"""Explorer error hierarchy."""
