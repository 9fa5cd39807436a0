# passwatch/app/services/login_ip.py
"""
Login origin tracking and new-sign-in alerts.

Flow after a successful login (see `track_login`):
1. record the (user, IP) sighting: first sighting creates an untrusted
   row, later ones bump `last_seen`
2. if the row is untrusted, ask the throttle whether an alert for this
   pair went out in the last few seconds
3. if not, mark the pair and send one alert email

Nothing here is allowed to fail a login: `track_login` runs detached
(services/background.py) and delivery errors are swallowed and logged.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from passwatch.app.core.clock import Clock, system_clock
from passwatch.app.core.errors import (
    NotificationDeliveryFailure,
    RecordNotFound,
    persistence_errors,
)
from passwatch.app.models.login_ip import LoginIp
from passwatch.app.models.user import User
from passwatch.app.services import users
from passwatch.app.services.email import EmailService, render_new_login_alert
from passwatch.app.services.throttle import NotificationThrottle

logger = logging.getLogger(__name__)

DEVICE_INFO_MAX_LENGTH = 255


@dataclass
class LoginRecordResult:
    is_new_ip: bool
    record: LoginIp


class LoginIpTracker:
    """Reads and writes the per-user login IP table."""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    async def _find(self, user_id: str, ip_address: str) -> Optional[LoginIp]:
        result = await self.db.execute(
            select(LoginIp).where(
                LoginIp.user_id == user_id,
                LoginIp.ip_address == ip_address,
            )
        )
        return result.scalars().first()

    async def record_login(
        self,
        user_id: str,
        ip_address: str,
        device_info: Optional[str] = None,
    ) -> LoginRecordResult:
        """
        Record one sighting of `ip_address` for `user_id`.

        - Known pair: `last_seen` moves to now; `device_info` is filled in
          only if it was still empty (first write wins)
        - New pair: a row is created untrusted with first_seen == last_seen

        Raises:
            UserNotFound: if the user id does not resolve
            PersistenceFailure: if the store fails
        """
        await users.require_user(self.db, user_id)
        if device_info:
            device_info = device_info.strip()[:DEVICE_INFO_MAX_LENGTH] or None
        now = self.clock.now()

        with persistence_errors("record login IP"):
            record = await self._find(user_id, ip_address)

            if record is None:
                record = LoginIp(
                    user_id=user_id,
                    ip_address=ip_address,
                    device_info=device_info,
                    is_trusted=False,
                    first_seen=now,
                    last_seen=now,
                )
                self.db.add(record)
                try:
                    await self.db.commit()
                except IntegrityError:
                    # Another login from the same origin inserted the pair first
                    await self.db.rollback()
                    record = await self._find(user_id, ip_address)
                    if record is None:
                        raise
                else:
                    logger.info(
                        "New login IP recorded",
                        extra={"event": "login_ip_new", "user_id": user_id, "ip_address": ip_address},
                    )
                    return LoginRecordResult(is_new_ip=True, record=record)

            record.last_seen = now
            if device_info and not record.device_info:
                record.device_info = device_info
            self.db.add(record)
            await self.db.commit()

        return LoginRecordResult(is_new_ip=False, record=record)

    async def list_ips(self, user_id: str) -> List[LoginIp]:
        """All known origins for the user, most recently seen first."""
        with persistence_errors("list login IPs"):
            result = await self.db.execute(
                select(LoginIp)
                .where(LoginIp.user_id == user_id)
                .order_by(LoginIp.last_seen.desc())
            )
            return list(result.scalars().all())

    async def set_trust(self, user_id: str, record_id: str, is_trusted: bool) -> LoginIp:
        """
        Mark one of the user's IPs trusted or untrusted.

        Raises:
            RecordNotFound: if no record with that id belongs to the user
        """
        with persistence_errors("update IP trust status"):
            result = await self.db.execute(
                select(LoginIp).where(LoginIp.id == record_id, LoginIp.user_id == user_id)
            )
            record = result.scalars().first()
            if record is None:
                raise RecordNotFound("Login IP not found")

            record.is_trusted = is_trusted
            self.db.add(record)
            await self.db.commit()

        logger.info(
            f"Login IP marked as {'trusted' if is_trusted else 'untrusted'}",
            extra={"event": "login_ip_trust_changed", "user_id": user_id, "record_id": record_id},
        )
        return record


class LoginAlertNotifier:
    """Sends at most one new-sign-in alert per (user, IP) per throttle window."""

    def __init__(
        self,
        throttle: NotificationThrottle,
        mailer: EmailService,
        clock: Clock = system_clock,
    ):
        self.throttle = throttle
        self.mailer = mailer
        self.clock = clock

    async def notify_new_login(
        self,
        user: User,
        ip_address: str,
        device_info: Optional[str] = None,
    ) -> bool:
        """
        Alert the user about a sign-in from `ip_address`.

        Returns:
            True only if the send call completed without raising. Delivery to
            the mailbox is not confirmed. Failures are logged, never raised.
        """
        # Check and mark in one step so a racing duplicate sees the mark
        if not self.throttle.try_acquire(user.id, ip_address):
            logger.info(
                "Skipping duplicate login alert",
                extra={"event": "login_alert_throttled", "user_id": user.id, "ip_address": ip_address},
            )
            return False

        subject, html_body = render_new_login_alert(
            user_name=user.name,
            ip_address=ip_address,
            device_info=device_info,
            when=self.clock.now(),
        )
        try:
            sent = await self.mailer.send(user.email, subject, html_body)
        except NotificationDeliveryFailure as e:
            logger.error(
                f"Failed to send login alert: {e.original}",
                extra={"event": "login_alert_failed", "user_id": user.id, "error": str(e.original)},
            )
            return False

        if sent:
            logger.info(
                "Login alert sent",
                extra={"event": "login_alert_sent", "user_id": user.id, "ip_address": ip_address},
            )
        return sent


async def track_login(
    session_factory: Callable[[], AsyncSession],
    notifier: LoginAlertNotifier,
    user_id: str,
    ip_address: str,
    device_info: Optional[str] = None,
) -> LoginRecordResult:
    """
    Record the login origin and alert on untrusted IPs.

    Opens its own session: it runs after the request's session is gone.
    Trusted IPs never trigger an alert.
    """
    async with session_factory() as db:
        tracker = LoginIpTracker(db, clock=notifier.clock)
        result = await tracker.record_login(user_id, ip_address, device_info)

        if not result.record.is_trusted:
            user = await users.require_user(db, user_id)
            await notifier.notify_new_login(
                user,
                ip_address,
                result.record.device_info or device_info,
            )

        return result

