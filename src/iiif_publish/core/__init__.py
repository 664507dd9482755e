"""Settings and logging shared across the package."""
