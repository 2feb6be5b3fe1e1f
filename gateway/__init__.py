"""HTTP gateway: configuration, FastAPI app and the server entry point."""
