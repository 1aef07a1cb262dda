from fastapi import APIRouter

from adcraft.readiness import readiness_manager

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "healthy"}


@router.get("/ready")
def readiness_check():
    from adcraft import main

    services = readiness_manager.check_services(main.data_layer, main.webhook_service)
    return {
        "ready": readiness_manager.is_ready and services["storage"],
        "services": services
    }
