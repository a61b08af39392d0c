from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends, Header
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class RoleAuthStrategy:
    @staticmethod
    def is_staff(user: UserEntity) -> bool:
        return user.is_staff


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(' ')
    if scheme.lower() != 'bearer' or not credentials:
        return None
    return credentials.strip()


@inject
async def get_current_user(
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
    token: Optional[str] = Cookie(None, alias='fastapiusersauth'),
    authorization: Optional[str] = Header(None),
) -> UserEntity:
    """Stateless: the user is rebuilt from the cookie or bearer token, no DB query."""
    return jwt_auth.get_current_user_info_from_jwt(token or _bearer_token(authorization))


async def require_staff(current_user: UserEntity = Depends(get_current_user)) -> UserEntity:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_staff',
        attributes={
            'user.id': current_user.id,
            'user.role': current_user.role.value,
        },
    ):
        if not RoleAuthStrategy.is_staff(current_user):
            raise ForbiddenError('Only staff can perform this action')
        return current_user
