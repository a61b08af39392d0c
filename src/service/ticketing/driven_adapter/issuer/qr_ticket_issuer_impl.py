"""
QR Ticket Issuer

Payload: sorted-key compact JSON of
    {eventId, holderId, issuedAt, seatId, ticketId}
with issuedAt in ISO 8601 UTC, millisecond precision. The payload depends only on
fields fixed at confirmation, so re-issuing a ticket yields the same string.
"""

from io import BytesIO

import orjson
import qrcode
from qrcode import constants

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.types.datetime_utils import as_utc
from src.service.ticketing.app.interface.i_ticket_issuer import ITicketIssuer
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.ticketing_error import InvalidTicketTransitionError
from src.service.ticketing.domain.value_object.ticket_issuance import TicketIssuance


class QrTicketIssuerImpl(ITicketIssuer):
    def __init__(self, *, box_size: int | None = None, border: int | None = None) -> None:
        self.box_size = box_size or settings.QR_BOX_SIZE
        self.border = border if border is not None else settings.QR_BORDER

    def derive_payload(self, *, ticket: Ticket) -> str:
        if ticket.verification_payload is not None:
            return ticket.verification_payload
        if ticket.issued_at is None:
            raise InvalidTicketTransitionError('Only confirmed tickets can be issued')

        return orjson.dumps(
            {
                'ticketId': ticket.ticket_id,
                'eventId': ticket.event_id,
                'holderId': ticket.holder_id,
                'seatId': ticket.seat_id,
                'issuedAt': as_utc(ticket.issued_at).isoformat(timespec='milliseconds'),
            },
            option=orjson.OPT_SORT_KEYS,
        ).decode()

    def render_png(self, payload: str) -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=constants.ERROR_CORRECT_M,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(payload)
        qr.make(fit=True)
        image = qr.make_image(fill_color='black', back_color='white')

        buffer = BytesIO()
        image.save(buffer, format='PNG')
        return buffer.getvalue()

    @Logger.io(truncate_content=True)
    def issue(self, *, ticket: Ticket) -> TicketIssuance:
        payload = self.derive_payload(ticket=ticket)
        try:
            image = self.render_png(payload)
        except Exception as e:
            Logger.base.warning(
                f'🖼️ [ISSUER] QR image unavailable for {ticket.ticket_id}: '
                f'{type(e).__name__}: {e}'
            )
            return TicketIssuance(payload=payload, image=None)
        return TicketIssuance(payload=payload, image=image)
