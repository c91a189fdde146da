from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, EmailStr, Field
import logging

from ..settings import settings
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import UserAccount
from ..schemas import PublicUser

router = APIRouter(prefix="/api/auth", tags=["auth"])

logger = logging.getLogger(__name__)
logging.getLogger('passlib').setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


class Token(BaseModel):
	access_token: str
	token_type: str = "bearer"


class RegisterRequest(BaseModel):
	fullName: str = Field(min_length=2, max_length=50)
	email: EmailStr
	password: str = Field(min_length=8)


class LoginRequest(BaseModel):
	email: str
	password: str


def _public(user: UserAccount) -> dict:
	return PublicUser(
		id=user.id, full_name=user.full_name, email=user.email, created_at=user.created_at
	).model_dump(by_alias=True, mode="json")


def _truncate(password: str) -> str:
	# bcrypt only looks at the first 72 bytes
	return password.encode("utf-8")[:72].decode("utf-8", errors="ignore")


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(_truncate(plain_password), hashed_password)


def hash_password(password: str) -> str:
	return pwd_context.hash(_truncate(password))


def authenticate_user(db: Session, email: str, password: str) -> Optional[UserAccount]:
	email = (email or "").strip().lower()
	user_row = db.query(UserAccount).filter(UserAccount.email == email, UserAccount.is_active.is_(True)).first()
	if user_row and verify_password(password, user_row.password_hash):
		return user_row
	return None


def _resolve_expiry(expires_delta: Optional[timedelta]) -> datetime:
	delta = expires_delta
	if delta is None:
		minutes = getattr(settings, "access_token_expire_minutes", None)
		if isinstance(minutes, int) and minutes > 0:
			delta = timedelta(minutes=minutes)
		else:
			delta = timedelta(days=7)
	now = datetime.now(timezone.utc)
	try:
		return now + delta
	except OverflowError:
		# Cap at far future but within datetime bounds
		return datetime.max.replace(tzinfo=timezone.utc)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
	to_encode = data.copy()
	expire = _resolve_expiry(expires_delta)
	to_encode.update({"exp": expire})
	encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
	return encoded_jwt


def _token_for(user: UserAccount) -> str:
	return create_access_token({"sub": str(user.id), "email": user.email})


@router.post("/register", status_code=201)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
	full_name = req.fullName.strip()
	email = str(req.email).strip().lower()
	if len(full_name) < 2:
		raise HTTPException(status_code=400, detail="Name must be at least 2 characters")
	existing = db.query(UserAccount).filter(UserAccount.email == email).first()
	if existing:
		raise HTTPException(status_code=409, detail="Account with this email already exists")
	row = UserAccount(full_name=full_name, email=email, password_hash=hash_password(req.password), is_active=True)
	db.add(row)
	try:
		db.commit()
	except IntegrityError:
		# Lost a race against a concurrent registration with the same email
		db.rollback()
		raise HTTPException(status_code=409, detail="Account with this email already exists")
	db.refresh(row)
	logger.info("Registered user %s", row.id)
	return {
		"success": True,
		"message": "Account created successfully",
		"token": _token_for(row),
		"user": _public(row),
	}


@router.post("/login")
async def login(req: LoginRequest, db: Session = Depends(get_db)):
	if not req.email or not req.password:
		raise HTTPException(status_code=400, detail="Email and password are required")
	user = authenticate_user(db, req.email, req.password)
	if not user:
		raise HTTPException(status_code=401, detail="Invalid email or password")
	return {
		"success": True,
		"message": "Login successful",
		"token": _token_for(user),
		"user": _public(user),
	}


@router.post("/token", response_model=Token)
async def token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
	user = authenticate_user(db, form_data.username, form_data.password)
	if not user:
		raise HTTPException(status_code=401, detail="Incorrect email or password")
	return Token(access_token=_token_for(user))


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> PublicUser:
	credentials_exception = HTTPException(
		status_code=401,
		detail="Invalid or expired token",
		headers={"WWW-Authenticate": "Bearer"},
	)
	try:
		payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
		subject: str | None = payload.get("sub")
		if subject is None:
			raise credentials_exception
		user_id = int(subject)
	except (JWTError, ValueError):
		raise credentials_exception
	row = db.get(UserAccount, user_id)
	if not row or not row.is_active:
		raise HTTPException(status_code=401, detail="User not found or inactive", headers={"WWW-Authenticate": "Bearer"})
	return PublicUser(id=row.id, full_name=row.full_name, email=row.email, created_at=row.created_at)


@router.get("/me")
async def me(user: PublicUser = Depends(get_current_user)):
	return {"success": True, "user": user.model_dump(by_alias=True, mode="json")}
