"""
Ticket Ledger Repository (SQLAlchemy)

One session and one transaction per call. Status transitions lock the row with
SELECT ... FOR UPDATE and compare the stored status before writing.
"""

from typing import Any, AsyncContextManager, Callable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import as_utc
from src.service.ticketing.app.dto.ticket_stats_dto import TicketStatusStats
from src.service.ticketing.app.interface.i_ticket_ledger_repo import ITicketLedgerRepo
from src.service.ticketing.domain.entity.ticket_entity import Ticket, TicketCheckIn, TicketPayment
from src.service.ticketing.domain.enum.ticket_status import (
    ACTIVE_TICKET_STATUSES,
    PaymentMethod,
    PaymentStatus,
    TicketStatus,
)
from src.service.ticketing.domain.ticketing_error import (
    TicketNotFoundError,
    TicketStateConflictError,
)
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel


def _utc(value):
    return as_utc(value) if value is not None else None


class TicketLedgerRepoImpl(ITicketLedgerRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _model_to_entity(model: TicketModel) -> Ticket:
        return Ticket(
            ticket_id=model.ticket_id,
            event_id=model.event_id,
            holder_id=model.holder_id,
            seat_id=model.seat_id,
            status=TicketStatus(model.status),
            payment=TicketPayment(
                amount=model.payment_amount,
                currency=model.payment_currency,
                method=PaymentMethod(model.payment_method),
                status=PaymentStatus(model.payment_status),
                proof_reference=model.payment_proof_reference,
                paid_at=_utc(model.paid_at),
            ),
            check_in_record=TicketCheckIn(
                done=model.checked_in, at=_utc(model.checked_in_at), by=model.checked_in_by
            ),
            issued_at=_utc(model.issued_at),
            verification_payload=model.verification_payload,
            cancelled_at=_utc(model.cancelled_at),
            created_at=_utc(model.created_at),
            updated_at=_utc(model.updated_at),
        )

    @staticmethod
    def _apply(model: TicketModel, ticket: Ticket) -> TicketModel:
        model.event_id = ticket.event_id
        model.holder_id = ticket.holder_id
        model.seat_id = ticket.seat_id
        model.status = ticket.status.value
        model.payment_amount = ticket.payment.amount
        model.payment_currency = ticket.payment.currency
        model.payment_method = ticket.payment.method.value
        model.payment_status = ticket.payment.status.value
        model.payment_proof_reference = ticket.payment.proof_reference
        model.paid_at = ticket.payment.paid_at
        model.checked_in = ticket.check_in_record.done
        model.checked_in_at = ticket.check_in_record.at
        model.checked_in_by = ticket.check_in_record.by
        model.issued_at = ticket.issued_at
        model.verification_payload = ticket.verification_payload
        model.cancelled_at = ticket.cancelled_at
        if ticket.created_at is not None:
            model.created_at = ticket.created_at
        if ticket.updated_at is not None:
            model.updated_at = ticket.updated_at
        return model

    @Logger.io(truncate_content=True)
    async def create_batch(self, *, tickets: Sequence[Ticket]) -> List[Ticket]:
        async with self.session_factory() as session:
            models = [self._apply(TicketModel(ticket_id=t.ticket_id), t) for t in tickets]
            session.add_all(models)
            try:
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            for model in models:
                await session.refresh(model)
            return [self._model_to_entity(model) for model in models]

    @Logger.io
    async def get_by_ticket_id(self, *, ticket_id: str) -> Optional[Ticket]:
        async with self.session_factory() as session:
            model = await session.get(TicketModel, ticket_id)
            return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_ticket_ids(self, *, ticket_ids: Sequence[str]) -> List[Ticket]:
        if not ticket_ids:
            return []
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel).where(TicketModel.ticket_id.in_(list(ticket_ids)))
            )
            by_id = {model.ticket_id: model for model in result.scalars()}
        return [self._model_to_entity(by_id[tid]) for tid in ticket_ids if tid in by_id]

    @Logger.io
    async def update(self, *, ticket: Ticket, expected_status: TicketStatus) -> Ticket:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel)
                .where(TicketModel.ticket_id == ticket.ticket_id)
                .with_for_update()
            )
            model = result.scalar_one_or_none()
            if model is None:
                raise TicketNotFoundError()
            if model.status != expected_status.value:
                await session.rollback()
                raise TicketStateConflictError()

            self._apply(model, ticket)
            await session.commit()
            await session.refresh(model)
            return self._model_to_entity(model)

    @Logger.io(truncate_content=True)
    async def record_verification_payload(self, *, ticket_id: str, payload: str) -> str:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel).where(TicketModel.ticket_id == ticket_id).with_for_update()
            )
            model = result.scalar_one_or_none()
            if model is None:
                raise TicketNotFoundError()
            if model.verification_payload is None:
                model.verification_payload = payload
                await session.commit()
            return model.verification_payload

    @Logger.io
    async def find_active_by_holder(self, *, event_id: int, holder_id: int) -> List[Ticket]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel).where(
                    TicketModel.event_id == event_id,
                    TicketModel.holder_id == holder_id,
                    TicketModel.status.in_([s.value for s in ACTIVE_TICKET_STATUSES]),
                )
            )
            return [self._model_to_entity(model) for model in result.scalars()]

    @Logger.io
    async def list_active_by_event(self, *, event_id: int) -> List[Ticket]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel)
                .where(
                    TicketModel.event_id == event_id,
                    TicketModel.status.in_([s.value for s in ACTIVE_TICKET_STATUSES]),
                )
                .order_by(TicketModel.seat_id)
            )
            return [self._model_to_entity(model) for model in result.scalars()]

    @Logger.io
    async def list_by_holder(
        self,
        *,
        holder_id: int,
        status: Optional[TicketStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Ticket], int]:
        conditions = [TicketModel.holder_id == holder_id]
        if status is not None:
            conditions.append(TicketModel.status == status.value)
        return await self._newest_first_page(conditions, offset=offset, limit=limit)

    @Logger.io
    async def list_by_event(
        self, *, event_id: int, offset: int = 0, limit: int = 50
    ) -> Tuple[List[Ticket], int]:
        return await self._newest_first_page(
            [TicketModel.event_id == event_id], offset=offset, limit=limit
        )

    async def _newest_first_page(
        self, conditions: List[Any], *, offset: int, limit: int
    ) -> Tuple[List[Ticket], int]:
        async with self.session_factory() as session:
            total = await session.scalar(
                select(func.count()).select_from(TicketModel).where(*conditions)
            )
            result = await session.execute(
                select(TicketModel)
                .where(*conditions)
                .order_by(TicketModel.created_at.desc(), TicketModel.ticket_id.desc())
                .offset(offset)
                .limit(limit)
            )
            tickets = [self._model_to_entity(model) for model in result.scalars()]
        return tickets, int(total or 0)

    @Logger.io
    async def stats_by_event(self, *, event_id: int) -> List[TicketStatusStats]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(
                    TicketModel.status,
                    func.count(TicketModel.ticket_id),
                    func.coalesce(func.sum(TicketModel.payment_amount), 0),
                )
                .where(TicketModel.event_id == event_id)
                .group_by(TicketModel.status)
                .order_by(TicketModel.status)
            )
            return [
                TicketStatusStats(status=TicketStatus(status), count=count, revenue=int(revenue))
                for status, count, revenue in result.all()
            ]
