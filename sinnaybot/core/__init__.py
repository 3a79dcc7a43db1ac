"""Application factory and lifespan."""
