import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from app.api.routes import availability, notifications, reservation_sessions, reservations, settings as settings_routes
from app.core.config import settings
from app.db.database import Base, SessionLocal, engine
from app.services.notifications import NotificationDispatcher, NotificationQueue, get_mail_sender
from app.services.reservation_sessions import ReservationSessionStore

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    dispatcher = NotificationDispatcher(SessionLocal, get_mail_sender())
    queue = NotificationQueue(
        dispatcher,
        max_concurrency=settings.NOTIFICATION_MAX_CONCURRENCY,
        retry_base_delay=settings.NOTIFICATION_RETRY_BASE_DELAY_SECONDS,
        recheck_delay=settings.NOTIFICATION_RECHECK_DELAY_SECONDS,
    )
    queue.start()
    app.state.notification_queue = queue
    app.state.reservation_sessions = ReservationSessionStore(settings.RESERVATION_SESSION_MAX_ENTRIES)
    logger.info(f"Notification queue started (mail backend: {dispatcher.mail_sender.backend_name()})")

    yield

    dropped = await queue.shutdown()
    logger.info(f"Notification queue stopped ({dropped} pending task(s) dropped)")


app = FastAPI(title="Room Reservation API", version="0.1.0", lifespan=lifespan)

app.include_router(availability.router, prefix="/api/v1")
app.include_router(reservations.router, prefix="/api/v1")
app.include_router(settings_routes.router, prefix="/api/v1")
app.include_router(reservation_sessions.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "ok"}
