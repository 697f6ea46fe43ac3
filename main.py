import logging
import os

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.database import Database
from starlette.exceptions import HTTPException

import drives
import users
from config import get_settings
from database import get_db

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Carpool API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Error rendering ----------

def validation_errors(exc: RequestValidationError) -> list:
    errors = []
    for err in exc.errors():
        loc = err.get("loc") or ()
        error = (err.get("ctx") or {}).get("error")
        errors.append({
            "msg": str(error) if err.get("type") == "value_error" and error else err.get("msg"),
            "param": str(loc[-1]) if loc else None,
            "location": str(loc[0]) if loc else None,
            "value": err.get("input"),
        })
    return errors


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=jsonable_encoder({"errors": validation_errors(exc)}))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"msg": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return PlainTextResponse("Server Error", status_code=500)


app.include_router(users.router)
app.include_router(drives.router)


@app.get("/")
def read_root():
    return {"message": "Carpool API running"}


@app.get("/schema")
def get_schema():
    # Expose schemas to the database viewer (as per platform conventions)
    from schemas import Drive, Profile, User
    return {
        "user": User.model_json_schema(),
        "profile": Profile.model_json_schema(),
        "drive": Drive.model_json_schema(),
    }


@app.get("/test")
def test_database(db: Database = Depends(get_db)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": db.name,
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
