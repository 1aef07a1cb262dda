"""
Main application entry point.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Body, FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse

from adcraft.config import config
from adcraft.logger import logger
from adcraft.errors import DataContractError, ExternalServiceError, NormalizationError
from adcraft.data import DataLayer
from adcraft.health import router as health_router
from adcraft.ingest import WebhookIngestor
from adcraft.models.avatar import Avatar
from adcraft.models.product import Product, generate_id, utc_timestamp
from adcraft.readiness import readiness_manager
from adcraft.sentry import initialize_sentry
from adcraft.services.webhook_service import WebhookService

# Initialize services
data_layer = DataLayer.from_config(config)
webhook_service = WebhookService()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    logger.info("Starting AdCraft data service")
    initialize_sentry()
    await webhook_service.initialize()
    readiness_manager.check_services(data_layer, webhook_service)

    yield

    # Shutdown
    logger.info("Shutting down AdCraft data service")
    await webhook_service.close()


# Create FastAPI app
app = FastAPI(
    title="AdCraft Data API",
    description="Product and avatar store with duplicate suppression and integrity tools",
    version="1.0.0",
    lifespan=lifespan
)
app.include_router(health_router)


@app.exception_handler(DataContractError)
async def data_contract_error_handler(request: Request, exc: DataContractError):
    logger.warning(f"Rejected invalid data: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NormalizationError)
async def normalization_error_handler(request: Request, exc: NormalizationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _require_object(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")
    return data


def _update_or_raise(repository, entity_id: str, data: Dict[str, Any]):
    if repository.get(entity_id) is None:
        raise HTTPException(status_code=404, detail=f"{repository.label.capitalize()} {entity_id} not found")

    data["id"] = entity_id
    if repository.update(data):
        return repository.get(entity_id)

    clash = repository.find_update_conflict(data)
    if clash is not None:
        raise HTTPException(
            status_code=409,
            detail=f"{repository.label.capitalize()} would duplicate {clash.id}"
        )
    raise HTTPException(status_code=503, detail=f"Storage unavailable, {repository.label} not updated")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "AdCraft Data API",
        "version": "1.0.0",
        "status": "operational",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# ----- Products -----
# Storage access is blocking, so these handlers are plain functions run in
# FastAPI's threadpool.

@app.get("/api/v1/products")
def list_products():
    products = data_layer.list_products()
    return {"products": [p.to_dict() for p in products], "count": len(products)}


@app.post("/api/v1/products")
def create_product(payload: Any = Body(...)):
    product = Product.from_dict(_require_object(payload))

    if data_layer.create_product(product):
        return JSONResponse(status_code=201, content={"created": True, "product": product.to_dict()})

    existing = data_layer.products.find_duplicate(product)
    if existing is None:
        raise HTTPException(status_code=503, detail="Storage unavailable, product not saved")
    return {"created": False, "product": existing.to_dict()}


@app.post("/api/v1/products/samples")
def seed_sample_products():
    created = data_layer.products.seed_samples()
    return {"created": created}


@app.put("/api/v1/products/{product_id}")
def update_product(product_id: str, payload: Any = Body(...)):
    product = _update_or_raise(data_layer.products, product_id, _require_object(payload))
    return {"product": product.to_dict()}


@app.delete("/api/v1/products/{product_id}")
def delete_product(product_id: str):
    if not data_layer.delete_product(product_id):
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return {"deleted": True, "id": product_id}


@app.get("/api/v1/products/{product_id}/avatars")
def list_product_avatars(product_id: str):
    avatars = data_layer.avatars.list_for_product(product_id)
    return {"productId": product_id, "avatars": [a.to_dict() for a in avatars], "count": len(avatars)}


# ----- Avatars -----

@app.get("/api/v1/avatars")
def list_avatars():
    avatars = data_layer.list_avatars()
    return {"avatars": [a.to_dict() for a in avatars], "count": len(avatars)}


@app.post("/api/v1/avatars")
def create_avatar(payload: Any = Body(...)):
    data = _require_object(payload)
    data.setdefault("id", generate_id("avatar"))
    data.setdefault("createdAt", utc_timestamp())
    avatar = Avatar.from_dict(data)

    if data_layer.create_avatar(avatar):
        return JSONResponse(status_code=201, content={"created": True, "avatar": avatar.to_dict()})

    existing = data_layer.avatars.find_duplicate(avatar)
    if existing is None:
        raise HTTPException(status_code=503, detail="Storage unavailable, avatar not saved")
    return {"created": False, "avatar": existing.to_dict()}


@app.put("/api/v1/avatars/{avatar_id}")
def update_avatar(avatar_id: str, payload: Any = Body(...)):
    avatar = _update_or_raise(data_layer.avatars, avatar_id, _require_object(payload))
    return {"avatar": avatar.to_dict()}


@app.delete("/api/v1/avatars/{avatar_id}")
def delete_avatar(avatar_id: str):
    if not data_layer.delete_avatar(avatar_id):
        raise HTTPException(status_code=404, detail=f"Avatar {avatar_id} not found")
    return {"deleted": True, "id": avatar_id}


# ----- Integrity -----

@app.get("/api/v1/integrity")
def validate_integrity():
    return data_layer.validate_integrity().to_dict()


@app.post("/api/v1/integrity/repair")
def repair_orphans(allow_fallback: bool = True):
    result = data_layer.repair_orphans(allow_fallback=allow_fallback)
    return {"repair": result.to_dict(), "integrity": data_layer.validate_integrity().to_dict()}


@app.get("/api/v1/integrity/connections")
def check_connection(url: str):
    return data_layer.check_connection_for_url(url).to_dict()


# ----- Webhook -----

@app.post("/api/v1/webhooks/product-avatar")
async def scrape_product_and_avatar(payload: Any = Body(...)):
    """Run the product/avatar workflow and merge its result into the store."""
    data = _require_object(payload)
    product_url = str(data.get("productUrl", "")).strip()
    if not product_url:
        raise HTTPException(status_code=400, detail="productUrl is required")

    try:
        response = await webhook_service.trigger_product_scraping(data)
    except ExternalServiceError as e:
        logger.error(f"External service error: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")

    result = WebhookIngestor(data_layer.products, data_layer.avatars).merge(response)
    return {
        "success": True,
        "productUrl": product_url,
        **result.to_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
