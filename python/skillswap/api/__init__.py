"""HTTP API layer: dependencies and routers."""
