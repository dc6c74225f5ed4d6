from .auth import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    ProfileUpdate,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)
from .order import CreateOrderRequest, CreateOrderResponse, UpdateStatusRequest

__all__ = [
    "ChangePasswordRequest",
    "CreateOrderRequest",
    "CreateOrderResponse",
    "DeleteAccountRequest",
    "ProfileUpdate",
    "Token",
    "UpdateStatusRequest",
    "UserCreate",
    "UserLogin",
    "UserResponse",
]
