"""FastAPI web API over playback sessions."""
