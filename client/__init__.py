"""Client-side session handling for the pkeeper API."""
