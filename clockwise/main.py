# clockwise/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clockwise.api.v1.api import api_router
from clockwise.api.v1.endpoints import functions
from clockwise.core.config import settings
from clockwise.core.logging_config import configure_logging

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="ClockWise API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include the main router for all routes prefixed with /api/v1
app.include_router(api_router, prefix="/api/v1")

# The administrative functions live under their own prefix
app.include_router(functions.router, prefix="/functions/v1")

@app.get("/")
def read_root():
    return {"message": "Welcome to the ClockWise API"}
