from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time
from typing import Optional

from opentelemetry.trace import get_current_span

from nutritrack.core.config import settings
from nutritrack.api.routes.auth import router as auth_router
from nutritrack.api.routes.users import router as users_router
from nutritrack.api.routes.plans import router as plans_router
from nutritrack.api.routes.subscriptions import router as subscriptions_router
from nutritrack.api.routes.nutrition_plans import router as nutrition_plans_router
from nutritrack.api.routes.health import router as health_router
from nutritrack.utils.envelopes import api_success, api_error
from nutritrack.utils.exceptions import AppException
from nutritrack.core.db import dispose_engine, init_engine_and_session


logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
_logger = logging.getLogger("nutritrack.api")


def _current_trace_id() -> Optional[str]:
	_current_span = get_current_span()
	trace_id_int = _current_span.get_span_context().trace_id if _current_span else 0
	return f"{trace_id_int:032x}" if trace_id_int else None


@asynccontextmanager
async def lifespan(app: FastAPI):
	init_engine_and_session()
	yield
	await dispose_engine()


app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)

# Telemetry / Azure Monitor (optional, needs the "telemetry" extra)
if settings.ENABLE_APP_INSIGHTS and settings.AZURE_MONITOR_CONN_STR:
	try:
		from azure.monitor.opentelemetry import configure_azure_monitor
		from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
		from opentelemetry.instrumentation.logging import LoggingInstrumentor

		configure_azure_monitor(
			connection_string=settings.AZURE_MONITOR_CONN_STR,
			sampling_ratio=settings.SAMPLING_RATIO,
		)
		# Include trace/span ids in stdlib logging records
		LoggingInstrumentor().instrument(set_logging_format=True)
		FastAPIInstrumentor.instrument_app(app)
		_logger.info("Azure Monitor telemetry is enabled")
	except Exception as telemetry_exc:
		# Do not block app startup if telemetry fails
		_logger.warning("Failed to initialize Azure Monitor telemetry: %s", telemetry_exc)

app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.CORS_ORIGINS,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

# Normalize API prefix (must not end with '/')
_api_prefix = settings.API_PREFIX.rstrip("/")

app.include_router(auth_router, prefix=_api_prefix)
app.include_router(users_router, prefix=_api_prefix)
app.include_router(plans_router, prefix=_api_prefix)
app.include_router(subscriptions_router, prefix=_api_prefix)
app.include_router(nutrition_plans_router, prefix=_api_prefix)
app.include_router(health_router, prefix=_api_prefix)


# Structured request logging (includes trace correlation where available)
@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
	start_time = time.perf_counter()
	client_ip: Optional[str] = request.headers.get("x-forwarded-for") or (request.client.host if request.client else None)
	user_agent: Optional[str] = request.headers.get("user-agent")
	status_code: Optional[int] = None
	try:
		response = await call_next(request)
		status_code = response.status_code
		return response
	finally:
		elapsed_ms = (time.perf_counter() - start_time) * 1000.0
		_logger.info(
			"HTTP request",
			extra={
				"http.method": request.method,
				"http.route": request.url.path,
				"http.status_code": status_code,
				"http.duration_ms": round(elapsed_ms, 2),
				"net.peer.ip": client_ip,
				"http.user_agent": user_agent,
				"trace_id": _current_trace_id(),
			},
		)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
	_logger.info(
		"Request rejected",
		extra={
			"http.method": request.method,
			"http.route": request.url.path,
			"error.code": exc.code,
			"http.status_code": exc.status_code,
		},
	)
	return JSONResponse(
		status_code=exc.status_code,
		content=jsonable_encoder(api_error(code=exc.code, message=exc.message, details=exc.details)),
	)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
	return JSONResponse(
		status_code=exc.status_code,
		content=api_error(code=f"HTTP_{exc.status_code}", message=str(exc.detail)),
		headers=getattr(exc, "headers", None),
	)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
	return JSONResponse(
		status_code=400,
		content=api_error(
			code="VALIDATION_ERROR",
			message="Request validation failed",
			details=jsonable_encoder(exc.errors()),
		),
	)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
	_logger.exception(
		"Unhandled exception",
		extra={
			"http.method": request.method,
			"http.route": request.url.path,
			"trace_id": _current_trace_id(),
		},
	)
	return JSONResponse(status_code=500, content=api_error(code="INTERNAL_SERVER_ERROR", message="An unexpected error occurred"))


@app.get("/")
async def root():
	return api_success({"service": settings.APP_NAME, "status": "ok"})
