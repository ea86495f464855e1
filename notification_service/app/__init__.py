"""FastAPI application: factory, lifespan, routers and exception handlers."""
