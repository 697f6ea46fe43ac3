"""
Database Schemas

MongoDB collection schemas as Pydantic models.
Model name is converted to lowercase for the collection name:
- User -> "user" collection
- Profile -> "profile" collection
- Drive -> "drive" collection

GroupMember and Comment are embedded in Drive and have no collection of their own.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

# Core domain for the app: carpooling to hikes


class User(BaseModel):
    """
    Registered accounts
    Collection name: "user"
    """
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Unique login email")
    phone: str = Field(..., description="Contact phone number")
    password: str = Field(..., description="bcrypt hash of the password")
    avatar: Optional[str] = Field(None, description="Gravatar URL")
    date: Optional[datetime] = Field(None, description="Registration time")


class Profile(BaseModel):
    """
    Rider/driver attributes, one per user
    Collection name: "profile"
    """
    user: str = Field(..., description="Reference to User _id")
    grade: Optional[str] = Field(None, description="School grade or year")
    type: Optional[str] = Field(None, description="Rider type, e.g. 'hiker', 'climber'")
    exp: Optional[str] = Field(None, description="Experience level")
    skills: List[str] = Field(default_factory=list, description="Skill tags")


class GroupMember(BaseModel):
    """Snapshot of a user taken when they joined a drive"""
    user: str = Field(..., description="Reference to User _id")
    name: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    grade: Optional[str] = None
    type: Optional[str] = None
    exp: Optional[str] = None
    skills: Optional[List[str]] = None
    date: Optional[datetime] = Field(None, description="Join time")


class Comment(BaseModel):
    user: str = Field(..., description="Reference to the author's User _id")
    text: str = Field(..., min_length=1)
    name: Optional[str] = None
    avatar: Optional[str] = None
    date: Optional[datetime] = None


class Drive(BaseModel):
    """
    Trips offered by drivers
    Collection name: "drive"
    """
    user: str = Field(..., description="Reference to the driver's User _id")
    name: Optional[str] = Field(None, description="Driver name")
    avatar: Optional[str] = Field(None, description="Driver avatar")
    leavingDate: datetime = Field(..., description="Day of departure")
    leavingTime: str = Field(..., description="Departure time, free text")
    hike: str = Field(..., description="Destination")
    seats: int = Field(..., ge=0, description="Seats still free")
    description: str
    group: List[GroupMember] = Field(default_factory=list, description="Driver first, then riders")
    comments: List[Comment] = Field(default_factory=list, description="Newest first")
    date: Optional[datetime] = Field(None, description="Creation time")
