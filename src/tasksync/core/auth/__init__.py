"""身份 token 与密码哈希"""

from .passwords import hash_password, verify_password
from .tokens import TokenClaims, TokenService

__all__ = [
    "TokenClaims",
    "TokenService",
    "hash_password",
    "verify_password",
]
