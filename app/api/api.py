from fastapi import APIRouter
from app.api.routes.assets import router as assets_router
from app.api.routes.attendance import router as attendance_router
from app.api.routes.buildings import router as buildings_router
from app.api.routes.deployments import router as deployments_router
from app.api.routes.floors import router as floors_router
from app.api.routes.logs import router as logs_router
from app.api.routes.ping import router as ping_router
from app.api.routes.rooms import router as rooms_router
from app.api.routes.schedules import router as schedules_router
from app.api.routes.storage import router as storage_router
from app.api.routes.tickets import router as tickets_router
from app.api.routes.users import router as users_router
from app.api.routes.webhooks import router as webhooks_router

api_router = APIRouter(prefix="/api")
api_router.include_router(buildings_router)
api_router.include_router(floors_router)
api_router.include_router(rooms_router)
api_router.include_router(storage_router)
api_router.include_router(assets_router)
api_router.include_router(deployments_router)
api_router.include_router(schedules_router)
api_router.include_router(users_router)
api_router.include_router(tickets_router)
api_router.include_router(attendance_router)
api_router.include_router(logs_router)
api_router.include_router(webhooks_router)
api_router.include_router(ping_router)
