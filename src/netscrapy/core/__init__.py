"""Core domain: models, configuration, filtering and the scraper."""
