"""HTTP layer: routes and dependencies."""
