"""arca: resolve, fetch, verify and lock versioned agent assets."""
