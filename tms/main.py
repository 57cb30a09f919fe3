import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from tms import models
from tms.auth import auth_route
from tms.complaints import complaints_route
from tms.config import settings
from tms.database import SessionLocal, engine
from tms.expenses import expenses_route
from tms.middlewares.cache_control_middleware import CacheControlMiddleware
from tms.routes import health_route
from tms.staff_expenses import staff_expenses_route
from tms.users import users_route
from tms.utils.admin_seed import seed_default_admin
from tms.utils.rate_limiter import limiter, rate_limit_exceeded_handler

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

models.Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.seed_default_admin:
        db = SessionLocal()
        try:
            seed_default_admin(db)
        finally:
            db.close()
    logger.info(f"{settings.app_name} {settings.app_version} started")
    yield


app = FastAPI(
    title="Aarohi Task Management System API",
    version=settings.app_version,
    description=(
        "Back office for Aarohi Sewing Enterprises: user accounts, customer complaints, "
        "staff assignment and expense reimbursement. Authenticate with POST /auth/signin "
        "and send the token as `Authorization: Bearer <token>`."
    ),
    contact={"name": "Aarohi Sewing Enterprises", "email": "admin@aarohi.com"},
    license_info={"name": "Proprietary"},
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(CacheControlMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_route.router)

app.include_router(users_route.router)

app.include_router(complaints_route.router)

app.include_router(expenses_route.router)

app.include_router(staff_expenses_route.router)

app.include_router(health_route.router)
