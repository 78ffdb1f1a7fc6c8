"""
CORS middleware configuration.
Origins come from settings.cors_origins. A wildcard entry disables
credentialed requests; there is no cookie auth on this service.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.parking.config import settings


def setup_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        max_age=600,
    )
