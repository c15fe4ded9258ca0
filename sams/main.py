# sams/main.py
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import exc as sa_exc

from sams.config import settings
from sams.database import engine, Base
from sams.models.user import User  # noqa: F401  (registers tables)
from sams.models.assignment import AppraiserAssignment  # noqa: F401
from sams.models.appraisal import Appraisal  # noqa: F401
from sams.routers import auth, users, assignments, appraisals, reports
from sams.services.exceptions import AppraisalServiceError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(title="SAMS - Staff Appraisal Management System", version="1.0")

# Include Routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(assignments.router)
app.include_router(appraisals.router)
app.include_router(reports.router)


@app.exception_handler(AppraisalServiceError)
async def appraisal_error_handler(request: Request, exc: AppraisalServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


# Create DB Tables (demo runs only; use Alembic in prod)
@app.on_event("startup")
async def startup_event():
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
    return {"message": "Welcome to SAMS Backend"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("sams.main:app", host="0.0.0.0", port=8000, reload=True)
