"""
Auth routes: account registration, password login and the current-user lookup.
Every other router depends on the token issued here.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from taskflow.auth import hash_password, verify_password, create_token, get_current_user
from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas import AuthRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


def _session(user: User) -> dict:
    token = create_token({"user_id": user.id, "username": user.username})
    return {"token": token, "user": user.to_dict()}


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    if db.query(User).filter_by(username=body.username).first():
        raise HTTPException(status_code=400, detail="Username already taken")
    try:
        user = User(
            username=body.username,
            name=body.name,
            hashed_password=hash_password(body.password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        logger.error(f"Register error: {e}")
        raise HTTPException(status_code=500, detail="Failed to register")
    logger.info("Registered user %s", user.username)
    return {"message": "User registered successfully", **_session(user)}


@router.post("/login")
async def login(body: AuthRequest, db: Session = Depends(get_db)):
    """Authenticate with username + password."""
    user = db.query(User).filter_by(username=body.username).first()
    if not user or not verify_password(body.password, user.hashed_password):
        logger.warning("Failed login for %s", body.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {"message": "Login successful", **_session(user)}


@router.get("/me")
async def me(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user.to_dict()
