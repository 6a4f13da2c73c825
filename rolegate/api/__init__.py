"""
HTTP layer: FastAPI dependencies, routes and middleware.
"""
