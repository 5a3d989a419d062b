"""
Push notifications: device token registration and the OneSignal dispatcher.

The dispatcher polls ``notification_queue`` on a fixed interval. Each tick
takes the oldest pending rows (up to the batch size) and posts them one by
one to OneSignal. A row ends ``sent`` on HTTP 200 or ``failed`` with the error
text otherwise; failed rows are never retried here. Rows are committed one at
a time so a failure on one entry never undoes the entries before it.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import quote

import httpx
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wardrounds.auth import DoctorPrincipal
from wardrounds.config import Settings
from wardrounds.exceptions import InvalidRegistration, PushDeliveryError
from wardrounds.models.notification import NotificationQueue, PushToken
from wardrounds.schemas.notification import DispatchReport, RegisterTokenRequest
from wardrounds.time_utils import local_now

logger = logging.getLogger(__name__)

SENT_NOTE = "Sent successfully"


class PushTokenService:
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    async def _find(self, token: str) -> Optional[PushToken]:
        return await self.db.scalar(select(PushToken).where(PushToken.token == token))

    async def register(self, req: RegisterTokenRequest, principal: DoctorPrincipal) -> bool:
        """Upsert a device token keyed by the token string. Returns True when created.

        A concurrent first registration of the same token loses the insert on
        the unique constraint; the session is rolled back and the row the other
        request wrote is updated instead.
        """
        token = (req.token or "").strip()
        if not token:
            raise InvalidRegistration("token must not be empty")

        now = local_now(self.settings)
        fields = {
            "user_id": req.user_id or principal.id_user,
            "kd_dokter": req.kd_dokter or principal.kd_dokter,
            "device_type": req.device_type,
            "user_agent": req.user_agent,
            "platform": req.platform,
            "active": True,
            "last_used": now,
            "updated_at": now,
        }
        existing = await self._find(token)
        created = False
        if existing is None:
            self.db.add(PushToken(token=token, created_at=now, **fields))
            try:
                await self.db.flush()
                created = True
            except IntegrityError:
                await self.db.rollback()
                existing = await self._find(token)
                if existing is None:
                    raise
                logger.info("Push token registered concurrently; updating kd_dokter=%s", fields["kd_dokter"])

        if not created:
            for key, value in fields.items():
                if value is not None:
                    setattr(existing, key, value)
            await self.db.flush()

        logger.info("Registered push token for kd_dokter=%s (created=%s)", fields["kd_dokter"], created)
        return created


class OneSignalClient:
    """Thin wrapper over the OneSignal create-notification endpoint."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = settings.onesignal_api_url
        self.app_id = settings.onesignal_app_id
        self.api_key = settings.onesignal_api_key
        self.frontend_url = settings.frontend_url.rstrip("/")
        self.timeout = settings.notification_timeout
        self.transport = transport

    def deep_link(self, no_rawat: Optional[str]) -> str:
        if not no_rawat:
            return f"{self.frontend_url}/"
        return f"{self.frontend_url}/#/pasien/{quote(no_rawat, safe='')}"

    def build_payload(self, entry: NotificationQueue) -> dict:
        return {
            "app_id": self.app_id,
            "include_external_user_ids": [entry.kd_dokter],
            "headings": {"en": entry.title},
            "contents": {"en": entry.body},
            "web_url": self.deep_link(entry.no_rawat),
            "data": {"no_rawat": entry.no_rawat},
        }

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def send(self, client: httpx.AsyncClient, entry: NotificationQueue) -> dict:
        """POST one entry. Raises PushDeliveryError unless OneSignal answers 200 with JSON."""
        try:
            response = await client.post(
                self.api_url,
                headers={
                    "Authorization": f"Basic {self.api_key}",
                    "Content-Type": "application/json; charset=utf-8",
                },
                json=self.build_payload(entry),
            )
        except httpx.HTTPError as e:
            raise PushDeliveryError(f"request error: {e}")

        if response.status_code != 200:
            raise PushDeliveryError(f"HTTP {response.status_code}: {response.text}")
        try:
            return response.json()
        except ValueError:
            raise PushDeliveryError(f"malformed response: {response.text[:200]}")


class NotificationDispatcher:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        onesignal: Optional[OneSignalClient] = None,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.onesignal = onesignal or OneSignalClient(settings)
        self.batch_size = settings.notification_batch_size

    async def fetch_pending(self, db: AsyncSession) -> list[NotificationQueue]:
        result = await db.execute(
            select(NotificationQueue)
            .where(NotificationQueue.status == "pending")
            .order_by(NotificationQueue.created_at.asc(), NotificationQueue.id.asc())
            .limit(self.batch_size)
        )
        return list(result.scalars().all())

    async def dispatch_pending(self) -> DispatchReport:
        """Run one tick: send every pending entry of the current batch once."""
        report = DispatchReport()
        async with self.session_factory() as db:
            entries = await self.fetch_pending(db)
            if not entries:
                return report
            logger.info("Dispatching %d pending notification(s)", len(entries))

            async with self.onesignal.client() as client:
                for entry in entries:
                    try:
                        await self.onesignal.send(client, entry)
                    except PushDeliveryError as e:
                        entry.status = "failed"
                        entry.error_message = e.reason
                        report.failed += 1
                        logger.warning("Notification %s to %s failed: %s", entry.id, entry.kd_dokter, e.reason)
                    else:
                        entry.status = "sent"
                        entry.error_message = SENT_NOTE
                        entry.sent_at = local_now(self.settings)
                        report.sent += 1
                        logger.info("Notification %s sent to %s", entry.id, entry.kd_dokter)
                    await db.commit()
        return report

    async def run_forever(self, interval: Optional[float] = None) -> None:
        interval = interval if interval is not None else self.settings.notification_poll_interval
        logger.info("Notification worker started (interval=%ss, batch=%d)", interval, self.batch_size)
        while True:
            try:
                await self.dispatch_pending()
            except Exception:
                # A broken tick (e.g. database unavailable) must not stop the worker
                logger.exception("Notification tick failed")
            await asyncio.sleep(interval)
