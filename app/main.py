"""Main FastAPI application"""
from fastapi import FastAPI
from app.config import get_settings
from app.middleware.cors import setup_cors
from app.middleware.error_handler import ErrorHandlerMiddleware
import logging

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Survey Form API",
    description="Topic-aware survey form validation, submission and question enrichment",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Setup CORS
setup_cors(app)

# Add error handling middleware
app.add_middleware(ErrorHandlerMiddleware)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "survey-form-backend", "environment": settings.environment}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Survey Form API",
        "version": "1.0.0",
        "docs": "/docs"
    }

# Import and include routers
from app.routers import survey

app.include_router(survey.router, prefix="/api/survey", tags=["Survey"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
