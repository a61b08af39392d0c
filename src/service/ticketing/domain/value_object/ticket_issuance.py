from typing import Optional

import attrs


@attrs.define(frozen=True)
class TicketIssuance:
    payload: str
    image: Optional[bytes] = attrs.field(default=None, repr=False)
    image_mime_type: str = 'image/png'

    @property
    def image_available(self) -> bool:
        return self.image is not None
