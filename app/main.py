import asyncio
from fastapi import FastAPI, WebSocket, WebSocketDisconnect, APIRouter
from app.api.v1.routes import events as events_router, rsvps as rsvps_router, users as users_router, health as health_router
from app.db.session import engine, Base
from app.events.consumer import run_worker
from app.events.publisher import close_connection
from app.workers.promotion_sweeper import run_sweeper
from app.websocket.manager import manager
from app.cache.redis_client import cache
from app.core.config import settings
from app.core.logging import logger
from fastapi.middleware.cors import CORSMiddleware
from app.core.rate_limit import limiter
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

app = FastAPI(title="EventHub")

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(users_router.router)
api_router.include_router(events_router.router)
api_router.include_router(rsvps_router.router)
api_router.include_router(health_router.router)

app.include_router(api_router)

_background_tasks = []

@app.on_event("startup")
async def on_startup():
    # create tables (migrations are applied with alembic in deployed environments)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if settings.NOTIFICATIONS_ENABLED:
        _background_tasks.append(asyncio.create_task(run_worker()))
    if settings.PROMOTION_SWEEP_ENABLED:
        _background_tasks.append(asyncio.create_task(run_sweeper()))

@app.on_event("shutdown")
async def on_shutdown():
    for task in _background_tasks:
        task.cancel()
    _background_tasks.clear()
    await close_connection()
    await cache.close()

@app.websocket("/ws/notifications/{user_id}")
async def websocket_endpoint(websocket: WebSocket, user_id: str):
    """
    Push channel for waiting-list and RSVP notifications.
    Authentication is enforced by the gateway in front of this service.
    Example: ws://localhost:8000/ws/notifications/{user_id}
    """
    await manager.connect(user_id, websocket)
    logger.info(f"WebSocket connection established for user {user_id}")
    try:
        while True:
            # Keep the connection open, though we don't expect messages from client
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.disconnect(user_id, websocket)
        logger.info(f"WebSocket disconnected for user {user_id}")
