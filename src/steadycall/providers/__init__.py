"""Provider clients built on the request executor."""
