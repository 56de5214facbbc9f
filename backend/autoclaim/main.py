from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autoclaim.api.v1.routes.bookings import router as bookings_router
from autoclaim.api.v1.routes.claims import router as claims_router
from autoclaim.api.v1.routes.health import router as health_router
from autoclaim.core.logging import configure_logging_if_needed

configure_logging_if_needed()

app = FastAPI(title="AutoClaim API")

# Dev-friendly CORS policy so the dashboard can call the API directly.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/v1")
app.include_router(bookings_router)
app.include_router(claims_router)
