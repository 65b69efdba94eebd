import asyncio
import logging
from typing import List, Optional

from pyfcm import FCMNotification

from medpanel.config import get_settings


logger = logging.getLogger(__name__)


class NoopPush:

    enabled = False

    async def send_fcm(self, tokens: List[str], title: str, body: str, data: dict | None = None) -> None:
        return


class FcmPush:

    enabled = True

    def __init__(self, service_account_file: str, project_id: str) -> None:
        self._client = FCMNotification(service_account_file=service_account_file, project_id=project_id)

    def _notify(self, token: str, title: str, body: str, data: dict) -> None:
        self._client.notify(
            fcm_token=token,
            notification_title=title,
            notification_body=body,
            data_payload={k: str(v) for k, v in data.items()},
        )

    async def send_fcm(self, tokens: List[str], title: str, body: str, data: dict | None = None) -> None:
        if not tokens:
            return
        # pyfcm is blocking; keep it off the event loop
        for token in tokens:
            try:
                await asyncio.to_thread(self._notify, token, title, body, data or {})
            except Exception:
                logger.warning("FCM delivery failed for one device token", exc_info=True)


_push: Optional[NoopPush | FcmPush] = None


async def get_push() -> NoopPush | FcmPush:
    global _push
    if _push is not None:
        return _push
    settings = get_settings()
    if not settings.fcm_service_account_file or not settings.fcm_project_id:
        logger.info("FCM not configured; push notifications disabled")
        _push = NoopPush()
        return _push
    _push = FcmPush(settings.fcm_service_account_file, settings.fcm_project_id)
    return _push
