"""Client side. Keeps recipes in memory and in a local cache, and syncs them
with the server when it can."""
