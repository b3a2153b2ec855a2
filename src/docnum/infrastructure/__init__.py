"""Infrastructure layer — persistence backends, stores, and the remote client."""
