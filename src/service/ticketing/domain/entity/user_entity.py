from enum import StrEnum

import attrs


class UserRole(StrEnum):
    BUYER = 'buyer'
    STAFF = 'staff'
    ADMIN = 'admin'


@attrs.define(frozen=True)
class UserEntity:
    """Caller identity decoded from the platform JWT; accounts live in the user service."""

    id: int
    role: UserRole = UserRole.BUYER
    name: str = ''

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.STAFF, UserRole.ADMIN)
