from fastapi import APIRouter
from fittrack.api.v1.workouts import router as workouts_router
from fittrack.api.v1.chat import router as chat_router

api_router = APIRouter()

api_router.include_router(workouts_router, prefix="/workouts", tags=["workouts"])
api_router.include_router(chat_router, prefix="/chat", tags=["chat"])
