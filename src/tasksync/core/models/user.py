"""User Domain Model + 认证请求 DTO"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..config import PASSWORD_MIN_LENGTH, USER_NAME_MAX_LENGTH, USER_NAME_MIN_LENGTH


class User(BaseModel):
    """User 数据模型（含密码哈希，仅在服务端内部流转）"""

    id: str = Field(description="唯一标识，ULID 格式")
    email: str = Field(description="登录邮箱，唯一")
    name: str = Field(description="显示名称")
    password_hash: str = Field(repr=False, description="scrypt 哈希")
    created_at: datetime
    updated_at: datetime

    def to_public(self) -> "UserPublic":
        return UserPublic(id=self.id, email=self.email, name=self.name)


class UserPublic(BaseModel):
    """对外暴露的用户信息"""

    id: str
    email: str
    name: str


class RegisterInput(BaseModel):
    """注册请求体"""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    name: str = Field(min_length=USER_NAME_MIN_LENGTH, max_length=USER_NAME_MAX_LENGTH)


class LoginInput(BaseModel):
    """登录请求体"""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    """注册/登录响应"""

    user: UserPublic
    token: str
