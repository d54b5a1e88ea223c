# app/main.py
from fastapi import FastAPI
from app.config import settings
from app.database import engine, Base
from app.models.user import User
from app.models.criterion import Criterion
from app.models.assessment import SelfAssessment, ManagerAssessment, CommitteeAssessment, Assessment360
from app.routers import hr
import logging
from sqlalchemy import exc as sa_exc


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Performance Evolution Analytics", version="1.0")

# Include Routers
app.include_router(hr.router)

# Create DB Tables (for demo only, use Alembic in prod)
@app.on_event("startup")
async def startup_event():
    # create tables (async). ignore duplicate-object errors from previous partial runs.
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

@app.get("/")
def read_root():
    return {"message": "Welcome to the Performance Evolution Analytics API"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
