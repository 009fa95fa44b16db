from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.middleware.rate_limit import RateLimitMiddleware
from app.settings import settings

from .error_handlers import register_error_handlers
from .routes import account, admin, home, workout

app = FastAPI(title="repvoice")

register_error_handlers(app)
app.add_middleware(RateLimitMiddleware)
# added last so it wraps everything, including 429s and preflights
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.CORS_ALLOW_ORIGINS),
    allow_methods=["*"],
    allow_headers=list(settings.CORS_ALLOW_HEADERS),
)

app.include_router(home.router)
app.include_router(workout.router)
app.include_router(account.router)
app.include_router(admin.router)
