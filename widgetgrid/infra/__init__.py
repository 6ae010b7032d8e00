"""Infrastructure helpers: settings, logging and the JSON codec."""
