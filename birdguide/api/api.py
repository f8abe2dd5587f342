from fastapi import APIRouter

from .endpoints import auth_router, flashcard_router, species_router

api_router = APIRouter()

api_router.include_router(auth_router.router, prefix="/auth", tags=["Auth"])
api_router.include_router(species_router.router, prefix="/species", tags=["Species"])
api_router.include_router(flashcard_router.router, prefix="/flashcards", tags=["Flashcards"])
