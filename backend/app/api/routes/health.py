"""Health check routes"""

from fastapi import APIRouter

from config import Config

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "Puzzle2Profit Research Pipeline",
        "version": "1.0.0",
        "storage": "supabase" if Config.USE_SUPABASE else "sqlite",
    }
