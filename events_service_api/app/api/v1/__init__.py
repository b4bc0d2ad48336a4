"""Version 1 of the API: user and event resources."""
