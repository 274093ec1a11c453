import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopee_sync import __version__
from shopee_sync.api.v1.endpoints.auth import router as auth_router
from shopee_sync.api.v1.endpoints.products import router as products_router
from shopee_sync.api.v1.endpoints.variations import router as variations_router
from shopee_sync.core.config import settings
from shopee_sync.core.logging import configure_logging

configure_logging(settings.log_level)
_logger = logging.getLogger(__name__)

app = FastAPI(title="Shopee variation sync", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api/v1")
app.include_router(products_router, prefix="/api/v1")
app.include_router(variations_router, prefix="/api/v1")


@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5010)
