"""
Polling client du statut d'une transaction (GET /payment?action=status).

Reprend le comportement de la page de retour de la vitrine: interroge le
service toutes les 5 secondes tant que le paiement est 'pending' et s'arrête
dès qu'un statut terminal est observé. La tâche asyncio est un handle
explicite: stop() l'annule, et le context manager l'arrête à la sortie.

    async with PaymentStatusPoller(base_url, transaction_id) as poller:
        snapshot = await poller.wait()
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from .models import TERMINAL_STATUSES

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0

UpdateCallback = Callable[[str, Optional[Dict[str, Any]]], Optional[Awaitable[None]]]


class PaymentStatusPoller:
    def __init__(
        self,
        base_url: str,
        transaction_id: str,
        *,
        interval: float = DEFAULT_INTERVAL,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_update: Optional[UpdateCallback] = None,
        path: str = "/payment",
    ):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.base_url = base_url.rstrip("/")
        self.transaction_id = transaction_id
        self.interval = interval
        self.path = path
        self.on_update = on_update
        self.status = "loading"
        self.data: Optional[Dict[str, Any]] = None
        self._client = client
        self._owns_client = client is None
        self._transport = transport
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    async def check_once(self) -> str:
        """Une interrogation; toute erreur (réseau, JSON) est lue comme 'pending'."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=10.0, transport=self._transport)
        try:
            resp = await self._client.get(
                f"{self.base_url}{self.path}",
                params={"action": "status", "transaction_id": self.transaction_id},
            )
            result = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("poller check failed transaction_id=%s: %s", self.transaction_id, e)
            result = None

        data = result.get("data") if isinstance(result, dict) else None
        if isinstance(data, dict):
            self.status = data.get("status") or "pending"
            self.data = data
        else:
            self.status = "pending"

        if self.on_update is not None:
            maybe = self.on_update(self.status, self.data)
            if asyncio.iscoroutine(maybe):
                await maybe
        return self.status

    async def _close_owned_client(self) -> None:
        if self._owns_client and self._client is not None:
            client, self._client = self._client, None
            await client.aclose()

    async def _run(self) -> Optional[Dict[str, Any]]:
        try:
            while True:
                await self.check_once()
                if self.is_terminal:
                    return self.data
                await asyncio.sleep(self.interval)
        finally:
            # wait() seul (sans stop ni context manager) ne doit pas laisser le client ouvert
            await self._close_owned_client()

    def start(self) -> "asyncio.Task":
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def wait(self) -> Optional[Dict[str, Any]]:
        """Attend le statut terminal et retourne le dernier snapshot."""
        return await self.start()

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._close_owned_client()

    async def __aenter__(self) -> "PaymentStatusPoller":
        self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()
