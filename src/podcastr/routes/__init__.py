"""API routes for Podcastr."""
