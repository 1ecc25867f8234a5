from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.common.exceptions import AppException
from app.common.log import configure_logging
from app.config import get_settings
from app.ebooks.router import router as ebooks_router
from app.payments.router import router as payments_router
from app.purchases.router import router as purchases_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging(settings)
    yield
    # Shutdown


app = FastAPI(
    title="MangoRocket API",
    description="Purchase verification and entitlement API for MangoRocket courses and e-books",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "code": exc.code, **exc.extra},
        headers=exc.headers,
    )


# Include routers with /api/v1 prefix
app.include_router(payments_router, prefix="/api/v1/payments", tags=["payments"])
app.include_router(purchases_router, prefix="/api/v1/purchases", tags=["purchases"])
app.include_router(ebooks_router, prefix="/api/v1/ebooks", tags=["ebooks"])


@app.get("/health")
def health_check():
    return {"status": "healthy"}
