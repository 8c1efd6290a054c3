"""Content fetching from git repositories and local directories."""
