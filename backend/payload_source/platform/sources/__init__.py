"""Source entry points and retry strategies shared by the HTTP clients."""
