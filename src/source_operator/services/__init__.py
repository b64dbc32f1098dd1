"""Object store clients used by the reconciler."""
