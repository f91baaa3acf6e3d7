from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from clinic.config import settings
from clinic.database import engine
from clinic.models.all_models import Base
from clinic.routes import (
    auth_router,
    dashboard_router,
    patients_router,
    appointments_router,
    inventory_router,
    admin_router,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create any missing tables
    Base.metadata.create_all(bind=engine)
    logger.info("Clinic API started")
    yield

app = FastAPI(title="Clinic API", version="1.0.0", lifespan=lifespan)


@app.get("/", include_in_schema=False)
def read_root():
    return RedirectResponse(url="/docs")

@app.get("/health")
def health_check():
    return {"status": "healthy"}


api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(auth_router)
api_v1_router.include_router(dashboard_router)
api_v1_router.include_router(patients_router)
api_v1_router.include_router(appointments_router)
api_v1_router.include_router(inventory_router)
api_v1_router.include_router(admin_router)

app.include_router(api_v1_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
