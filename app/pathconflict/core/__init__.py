"""Core engine: configuration, context, worker pool and the analysis pipeline."""
