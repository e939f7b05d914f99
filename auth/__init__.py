"""Server-side credential and refresh-token lifecycle."""
