"""Console logging setup and the JSON Lines issue log."""
