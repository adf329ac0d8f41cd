# storefront/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import settings
from storefront.database import init_db
from storefront.errors import StorefrontError

# Routers
from storefront.routes.products import router as products_router
from storefront.routes.cart import router as cart_router
from storefront.routes.orders import router as orders_router
from storefront.routes.saved import router as saved_router
from storefront.routes.donations import router as donations_router
from storefront.routes.addresses import router as addresses_router
from storefront.routes.dashboard import router as dashboard_router
from storefront.routes.tracking import router as tracking_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Storefront API", version="1.0.0", lifespan=lifespan)

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain errors carry their own HTTP status
@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.__class__.__name__},
    )


# Router registration
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(saved_router)
app.include_router(donations_router)
app.include_router(addresses_router)
app.include_router(dashboard_router)
app.include_router(tracking_router)

@app.get("/")
def read_root():
    return {"message": "Storefront API is running"}
