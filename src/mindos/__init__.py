"""AI Mind OS progression API."""
