"""Flow index, animation clock and per-viewer playback sessions."""
