"""CORS middleware configuration"""
from fastapi.middleware.cors import CORSMiddleware
from app.config import get_settings


def setup_cors(app):
    """
    Allow the survey UI's origins to call the API

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )
