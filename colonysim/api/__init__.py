"""REST API: FastAPI app, engine manager, routes and schemas."""
