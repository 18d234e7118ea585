"""Domain services: storage, configuration, analysis, rate limiting, analytics, maintenance."""
