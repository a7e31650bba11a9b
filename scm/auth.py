from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, HTTPException, Request, status


class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"


HOME_PATHS = {
    Role.CUSTOMER: "/customer/homepage",
    Role.EMPLOYEE: "/employee/homepage",
    Role.MANAGER: "/manager/homepage",
}


@dataclass
class Principal:
    user_id: str
    email: str
    role: Role
    provider_access_token: str | None = None


def get_current_principal(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if not principal:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return principal


def home_path_for(role: Role) -> str:
    return HOME_PATHS[role]


def require_role(*allowed: Role):
    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
        return principal

    return _dep
