from fastapi import APIRouter
from app.api.v1.endpoints.biometric import fingerprint
from app.api.v1.endpoints.hr import employees

api_router = APIRouter()

# HR routes
api_router.include_router(employees.router, prefix="/employees", tags=["HR"])

# Biometric routes
api_router.include_router(fingerprint.router, prefix="/fingerprints", tags=["Biometric"])
