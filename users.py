import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pymongo.database import Database

from auth import create_token, get_current_user_id, gravatar_url, hash_password, verify_password
from config import Settings, get_settings
from database import create_document, get_db, serialize, to_object_id
from validation import LoginIn, ProfileIn, RegisterIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def find_user(db: Database, user_id: str):
    oid = to_object_id(user_id)
    if oid is None:
        return None
    return db["user"].find_one({"_id": oid}, {"password": 0})


def find_profile(db: Database, user_id: str):
    oid = to_object_id(user_id)
    if oid is None:
        return None
    return db["profile"].find_one({"user": oid})


def _credentials_error(msg: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"errors": [{"msg": msg}]})


@router.post("/users")
def register(payload: RegisterIn, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    if db["user"].find_one({"email": payload.email}):
        return _credentials_error("User already exists")

    data = {
        "name": payload.name,
        "email": payload.email,
        "phone": payload.phone,
        "avatar": gravatar_url(payload.email),
        "password": hash_password(payload.password),
        "date": datetime.now(timezone.utc),
    }
    user_id = create_document(db, "user", data)
    logger.info("Registered user %s", user_id)
    return {"token": create_token(user_id, settings)}


@router.post("/auth")
def login(payload: LoginIn, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = db["user"].find_one({"email": payload.email})
    if not user or not verify_password(payload.password, user.get("password", "")):
        return _credentials_error("Invalid Credentials")
    return {"token": create_token(str(user["_id"]), settings)}


@router.get("/auth")
def current_user(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    user = find_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize(user)


# ---------- Profiles ----------

@router.get("/profile/me")
def my_profile(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    profile = find_profile(db, user_id)
    if not profile:
        raise HTTPException(status_code=400, detail="There is no profile for this user")
    return serialize(profile)


@router.post("/profile")
def upsert_profile(payload: ProfileIn, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    user = find_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    fields = {k: v for k, v in payload.model_dump().items() if v is not None}
    existing = db["profile"].find_one({"user": user["_id"]})
    if existing:
        fields["updated_at"] = datetime.now(timezone.utc)
        db["profile"].update_one({"_id": existing["_id"]}, {"$set": fields})
        profile = db["profile"].find_one({"_id": existing["_id"]})
    else:
        fields["user"] = user["_id"]
        profile_id = create_document(db, "profile", fields)
        profile = db["profile"].find_one({"_id": to_object_id(profile_id)})
    return serialize(profile)
