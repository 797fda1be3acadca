"""NumPy kernels (CPU) used by the reference engine."""
