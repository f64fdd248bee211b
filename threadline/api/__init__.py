"""HTTP API: application factory, routes, dependencies and error mapping."""
