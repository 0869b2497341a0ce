"""Academic deadline scraping, normalization and reminder pipeline."""
