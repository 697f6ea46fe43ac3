"""
Request body models and field checks

Every required field is declared with a `None` default and validated by a
`before` validator so that a missing field and an empty one report the same
message. The messages end up in the 400 `{"errors": [...]}` body built by
`validation_errors` in main.py.
"""

import re
from datetime import date
from typing import Any, List, Optional, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator

DATE_FORMAT_ERROR = "Invalid Date, Check Zeroes"
DATE_PAST_ERROR = "Please Enter a Current or Future Date"

PHONE_RE = re.compile(r"^\+?\d{7,15}$")
DATE_RE = re.compile(r"\d{2}/\d{2}/\d{4}", re.ASCII)

# bcrypt refuses longer passwords
MAX_PASSWORD_BYTES = 72


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


def _require(value: Any, message: str) -> Any:
    if _is_empty(value):
        raise ValueError(message)
    return value


def parse_leaving_date(value: str, today: Optional[date] = None) -> date:
    """Parse a zero-padded MM/DD/YYYY string and reject days before `today`.

    `today` defaults to the server's local date.
    """
    if not isinstance(value, str) or not DATE_RE.fullmatch(value):
        raise ValueError(DATE_FORMAT_ERROR)
    month, day, year = (int(p) for p in value.split("/"))
    try:
        leaving = date(year, month, day)
    except ValueError:
        # month 13, day 32, February 30th...
        raise ValueError(DATE_PAST_ERROR) from None
    if leaving < (today or date.today()):
        raise ValueError(DATE_PAST_ERROR)
    return leaving


def _as_number(value: Any) -> Union[int, float]:
    if isinstance(value, bool):
        raise ValueError("Seats must be a number")
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            raise ValueError("Seats must be a number") from None
    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError("Seats must be a number")
    return int(number) if float(number).is_integer() else number


# ---------- Drives ----------

class DriveIn(BaseModel):
    """Body of POST /api/drives. Seats only have to be present here."""
    leavingDate: Optional[date] = Field(None, validate_default=True)
    leavingTime: Optional[str] = Field(None, validate_default=True)
    hike: Optional[str] = Field(None, validate_default=True)
    seats: Any = Field(None, validate_default=True)
    description: Optional[str] = Field(None, validate_default=True)

    @field_validator("leavingDate", mode="before")
    @classmethod
    def check_leaving_date(cls, value):
        _require(value, "Date is required")
        return parse_leaving_date(value)

    @field_validator("leavingTime", mode="before")
    @classmethod
    def check_leaving_time(cls, value):
        return _require(value, "Time is required")

    @field_validator("hike", mode="before")
    @classmethod
    def check_hike(cls, value):
        return _require(value, "Hike is required")

    @field_validator("seats", mode="before")
    @classmethod
    def check_seats(cls, value):
        _require(value, "Seats are required")
        try:
            return _as_number(value)
        except ValueError:
            return value

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, value):
        return _require(value, "Description is required")


class DriveUpdate(DriveIn):
    """Body of PUT /api/drives/{id}: same fields, seats must be numeric."""
    seats: Optional[Union[int, float]] = Field(None, validate_default=True)

    @field_validator("seats", mode="before")
    @classmethod
    def check_seats(cls, value):
        _require(value, "Seats are required")
        return _as_number(value)


class CommentIn(BaseModel):
    text: Optional[str] = Field(None, validate_default=True)

    @field_validator("text", mode="before")
    @classmethod
    def check_text(cls, value):
        return _require(value, "Text is required")


# ---------- Accounts ----------

class RegisterIn(BaseModel):
    name: Optional[str] = Field(None, validate_default=True)
    email: Optional[str] = Field(None, validate_default=True)
    phone: Optional[str] = Field(None, validate_default=True)
    password: Optional[str] = Field(None, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value):
        return _require(value, "Name is required")

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value):
        return normalize_email(value)

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, value):
        message = "Please include a valid phone number"
        _require(value, message)
        digits = re.sub(r"[\s\-()]", "", str(value))
        if not PHONE_RE.match(digits):
            raise ValueError(message)
        return value

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, value):
        if not isinstance(value, str) or len(value) < 6:
            raise ValueError("Please enter a password with more than 6 characters")
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Please enter a password of at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginIn(BaseModel):
    email: Optional[str] = Field(None, validate_default=True)
    password: Optional[str] = Field(None, validate_default=True)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value):
        return normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, value):
        return _require(value, "Password is required")


def normalize_email(value: Any) -> str:
    message = "Please include a valid email"
    if not isinstance(value, str) or not value:
        raise ValueError(message)
    try:
        return validate_email(value, check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise ValueError(message) from None


class ProfileIn(BaseModel):
    grade: Optional[str] = None
    type: Optional[str] = None
    exp: Optional[str] = None
    skills: Optional[Union[List[str], str]] = None

    @field_validator("skills", mode="before")
    @classmethod
    def check_skills(cls, value):
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return value
