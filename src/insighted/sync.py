from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from .common import console
from .errors import EnvironmentRefusal, SyncInProgress
from .outbox import OutboxItem, OutboxStore


class DeliveryOutcome(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    NETWORK_ERROR = "network_error"


class ItemStatus(str, Enum):
    UNATTEMPTED = "unattempted"
    IN_FLIGHT = "in_flight"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryResult:
    outcome: DeliveryOutcome
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is DeliveryOutcome.SUCCESS


@dataclass(frozen=True)
class ItemResult:
    item: OutboxItem
    status: ItemStatus
    outcome: DeliveryOutcome | None = None
    message: str = ""


@dataclass
class SyncReport:
    """Outcome of one sync pass, in the order the items were attempted."""

    results: list[ItemResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def delivered(self) -> int:
        return sum(1 for r in self.results if r.status is ItemStatus.DELIVERED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status is ItemStatus.FAILED)

    def status_of(self, item_id: int) -> ItemStatus:
        for result in self.results:
            if result.item.id == item_id:
                return result.status
        return ItemStatus.UNATTEMPTED


Deliver = Callable[[OutboxItem], DeliveryResult]
StatusCallback = Callable[[OutboxItem, ItemStatus], None]


class OutboxSynchronizer:
    """Deliver staged outbox items one at a time.

    A delivered item is removed from the store as soon as its delivery is
    confirmed; a rejected or unreachable one stays queued, unchanged, for the
    next pass. Only one pass may run at a time.
    """

    def __init__(
        self,
        store: OutboxStore,
        deliver: Deliver,
        is_online: Callable[[], bool],
    ):
        self.store = store
        self.deliver = deliver
        self.is_online = is_online

    @property
    def running(self) -> bool:
        return self.store.syncing

    def sync_all(self, on_status: StatusCallback | None = None) -> SyncReport:
        """Attempt every queued item, oldest first.

        Args:
            on_status (StatusCallback | None, optional): Called with each item
                as its status changes. Defaults to None.

        Raises:
            SyncInProgress: Another pass has not finished yet.
            EnvironmentRefusal: The device is offline; no item was touched.

        Returns:
            SyncReport: Per-item statuses and counts.
        """
        if self.store.syncing:
            raise SyncInProgress("A sync is already running.")
        if not self.is_online():
            raise EnvironmentRefusal(
                "You are still offline! Connect to the internet to sync."
            )

        self.store.syncing = True
        try:
            return self._run_pass(on_status or (lambda item, status: None))
        finally:
            self.store.syncing = False

    def _run_pass(self, notify: StatusCallback) -> SyncReport:
        items = self.store.list_items()
        for item in items:
            notify(item, ItemStatus.UNATTEMPTED)

        report = SyncReport()
        for item in items:
            notify(item, ItemStatus.IN_FLIGHT)
            result = self._attempt(item)
            if result.ok:
                result, status = self._dequeue(item, result)
            else:
                status = ItemStatus.FAILED
                console.log(
                    f"[red]Sync failed[/red] for item {item.id} ({result.outcome.value}): "
                    f"{result.message}"
                )
            report.results.append(
                ItemResult(
                    item=item,
                    status=status,
                    outcome=result.outcome,
                    message=result.message,
                )
            )
            notify(item, status)
        return report

    def _dequeue(
        self, item: OutboxItem, result: DeliveryResult
    ) -> tuple[DeliveryResult, ItemStatus]:
        """Remove a delivered item; if the store refuses, keep it queued as failed.

        The sink upserts by school ID, so delivering it again next pass is safe.
        """
        try:
            self.store.remove(item.id)
        except Exception as exc:
            message = f"Delivered but could not be removed from the outbox: {exc}"
            console.log(f"[red]Sync failed[/red] for item {item.id}: {message}")
            return DeliveryResult(result.outcome, message), ItemStatus.FAILED
        console.log(f"[green]✓ Synced[/green] {item.label}")
        return result, ItemStatus.DELIVERED

    def _attempt(self, item: OutboxItem) -> DeliveryResult:
        try:
            return self.deliver(item)
        except Exception as exc:
            return DeliveryResult(DeliveryOutcome.NETWORK_ERROR, str(exc))


def sync_all(
    store: OutboxStore,
    deliver: Deliver,
    is_online: Callable[[], bool],
    on_status: StatusCallback | None = None,
) -> SyncReport:
    return OutboxSynchronizer(store, deliver, is_online).sync_all(on_status)
