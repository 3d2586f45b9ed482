"""Prayer times for the current location, fetched from the Aladhan API."""
