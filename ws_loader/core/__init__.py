"""Request executor, options and response model."""
