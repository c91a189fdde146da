import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .db import init_db
from .errors import QuizLearnError, UpstreamFailure
from .settings import settings
from .routers import auth, health, quiz, topics, tutor, user

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("quizlearn")

app = FastAPI(title="QuizLearn API", version=__version__)
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(topics.router)
app.include_router(quiz.router)
app.include_router(user.router)
app.include_router(tutor.router)


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
	return JSONResponse(status_code=status_code, content={"success": False, "error": message}, headers=headers)


@app.exception_handler(QuizLearnError)
async def quizlearn_error_handler(request: Request, exc: QuizLearnError):
	if isinstance(exc, UpstreamFailure):
		logger.warning("Upstream failure on %s: %s", request.url.path, exc)
	elif exc.status_code >= 500:
		logger.error("Request failed on %s: %s", request.url.path, exc)
	return _error(exc.status_code, exc.public_message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
	return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
	logger.exception("Database error on %s", request.url.path, exc_info=exc)
	return _error(500, "Internal server error")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	errors = exc.errors()
	if errors:
		first = errors[0]
		field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
		message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
	else:
		message = "Invalid request"
	return _error(400, message)


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	init_db()
	logger.info("QuizLearn API started (LLM configured: %s)", bool(settings.llm_api_key))
