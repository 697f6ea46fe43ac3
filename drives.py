"""
Drive routes: listing, CRUD, joining/leaving the group, comments.

Group members and comments are embedded in the drive document. Every
mutation reads the drive, changes the list in memory and writes the list
back, so two concurrent joins on one drive can overwrite each other.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from pymongo.database import Database

from auth import get_current_user_id
from database import create_document, get_db, get_documents, serialize, to_object_id
from users import find_profile, find_user
from validation import CommentIn, DriveIn, DriveUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/drives")

PROFILE_FIELDS = ("grade", "type", "exp", "skills")


def start_of_today() -> datetime:
    return datetime.combine(date.today(), time.min)


def get_drive_or_404(db: Database, drive_id: str) -> dict:
    oid = to_object_id(drive_id)
    drive = db["drive"].find_one({"_id": oid}) if oid else None
    if not drive:
        raise HTTPException(status_code=404, detail="Drive not found")
    return drive


def get_user_or_404(db: Database, user_id: str) -> dict:
    user = find_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def member_snapshot(user: dict, profile: Optional[dict] = None) -> dict:
    """Copy of the user (and profile, when there is one) stored in a drive group."""
    entry = {
        "_id": ObjectId(),
        "user": user["_id"],
        "name": user.get("name"),
        "phone": user.get("phone"),
        "avatar": user.get("avatar"),
    }
    if profile:
        for key in PROFILE_FIELDS:
            if profile.get(key):
                entry[key] = profile[key]
    entry["date"] = datetime.now(timezone.utc)
    return entry


def member_index(drive: dict, user_id: str) -> int:
    for i, member in enumerate(drive.get("group", [])):
        if str(member.get("user")) == user_id:
            return i
    return -1


def save_drive(db: Database, drive: dict, *fields: str) -> None:
    changes = {f: drive[f] for f in fields}
    changes["updated_at"] = datetime.now(timezone.utc)
    db["drive"].update_one({"_id": drive["_id"]}, {"$set": changes})


# ---------- Drives ----------

@router.get("")
def list_drives(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    q = {"leavingDate": {"$gte": start_of_today()}, "seats": {"$gt": 0}}
    docs = get_documents(db, "drive", q, sort=[("leavingDate", -1)])
    return serialize(docs)


@router.get("/dashboard/me")
def my_drives(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    # a token for a malformed id can't be in any group
    oid = to_object_id(user_id)
    if oid is None:
        return []
    docs = get_documents(db, "drive", {"group.user": oid}, sort=[("leavingDate", -1)])
    return serialize(docs)


@router.get("/{drive_id}")
def get_drive(drive_id: str, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return serialize(get_drive_or_404(db, drive_id))


@router.post("")
def create_drive(payload: DriveIn, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    user = get_user_or_404(db, user_id)
    profile = find_profile(db, user_id)

    data = {
        "user": user["_id"],
        "name": user.get("name"),
        "avatar": user.get("avatar"),
        "leavingDate": datetime.combine(payload.leavingDate, time.min),
        "leavingTime": payload.leavingTime,
        "hike": payload.hike,
        "seats": payload.seats,
        "description": payload.description,
        # the driver is always the first member
        "group": [member_snapshot(user, profile)],
        "comments": [],
        "date": datetime.now(timezone.utc),
    }
    drive_id = create_document(db, "drive", data)
    logger.info("User %s created drive %s", user_id, drive_id)
    return serialize(db["drive"].find_one({"_id": ObjectId(drive_id)}))


@router.put("/{drive_id}")
def update_drive(drive_id: str, payload: DriveUpdate, user_id: str = Depends(get_current_user_id),
                 db: Database = Depends(get_db)):
    drive = get_drive_or_404(db, drive_id)
    if str(drive["user"]) != user_id:
        raise HTTPException(status_code=401, detail="User not Authorized")
    if payload.seats < 0:
        raise HTTPException(status_code=400, detail="Enter positive number of seats")

    user = get_user_or_404(db, user_id)
    fields = {
        "user": user["_id"],
        "avatar": user.get("avatar"),
        "leavingDate": datetime.combine(payload.leavingDate, time.min),
        "leavingTime": payload.leavingTime,
        "hike": payload.hike,
        "seats": payload.seats,
        "description": payload.description,
        "updated_at": datetime.now(timezone.utc),
    }
    db["drive"].update_one({"_id": drive["_id"]}, {"$set": fields})
    return serialize(db["drive"].find_one({"_id": drive["_id"]}))


@router.delete("/{drive_id}")
def delete_drive(drive_id: str, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    drive = get_drive_or_404(db, drive_id)
    if str(drive["user"]) != user_id:
        raise HTTPException(status_code=401, detail="User not authorized")

    db["drive"].delete_one({"_id": drive["_id"]})
    logger.info("User %s deleted drive %s", user_id, drive_id)
    return {"msg": "Drive removed"}


# ---------- Membership ----------

@router.put("/join/{drive_id}")
def join_drive(drive_id: str, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    drive = get_drive_or_404(db, drive_id)
    if member_index(drive, user_id) >= 0:
        raise HTTPException(status_code=400, detail="Drive already joined")
    if drive["seats"] < 1:
        raise HTTPException(status_code=400, detail="Drive full")

    user = get_user_or_404(db, user_id)
    profile = find_profile(db, user_id)
    if not profile:
        raise HTTPException(status_code=400, detail="You need a profile to join drives")

    drive["group"].insert(0, member_snapshot(user, profile))
    drive["seats"] -= 1
    save_drive(db, drive, "group", "seats")
    logger.info("User %s joined drive %s (%s seats left)", user_id, drive_id, drive["seats"])
    return serialize(drive["group"])


@router.put("/leave/{drive_id}")
def leave_drive(drive_id: str, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    drive = get_drive_or_404(db, drive_id)
    index = member_index(drive, user_id)
    if index < 0:
        raise HTTPException(status_code=400, detail="Drive not joined")

    drive["group"].pop(index)
    drive["seats"] += 1
    save_drive(db, drive, "group", "seats")
    logger.info("User %s left drive %s", user_id, drive_id)
    return serialize(drive["group"])


# ---------- Comments ----------

@router.post("/comment/{drive_id}")
def add_comment(drive_id: str, payload: CommentIn, user_id: str = Depends(get_current_user_id),
                db: Database = Depends(get_db)):
    drive = get_drive_or_404(db, drive_id)
    user = get_user_or_404(db, user_id)

    comment = {
        "_id": ObjectId(),
        "user": user["_id"],
        "text": payload.text,
        "name": user.get("name"),
        "avatar": user.get("avatar"),
        "date": datetime.now(timezone.utc),
    }
    drive.setdefault("comments", []).insert(0, comment)
    save_drive(db, drive, "comments")
    return serialize(drive["comments"])


@router.delete("/comment/{drive_id}/{comment_id}")
def remove_comment(drive_id: str, comment_id: str, user_id: str = Depends(get_current_user_id),
                   db: Database = Depends(get_db)):
    drive = get_drive_or_404(db, drive_id)
    comments = drive.get("comments", [])
    index = next((i for i, c in enumerate(comments) if str(c.get("_id")) == comment_id), -1)
    if index < 0:
        raise HTTPException(status_code=404, detail="Comment does not exist")
    if str(comments[index].get("user")) != user_id:
        raise HTTPException(status_code=401, detail="User not authorized")

    comments.pop(index)
    drive["comments"] = comments
    save_drive(db, drive, "comments")
    return serialize(comments)
