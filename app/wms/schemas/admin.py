from pydantic import BaseModel, ConfigDict, Field


class PermissionEntry(BaseModel):
    page: str
    view: bool = False
    edit: bool = False


class CreateUserRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: str = Field(min_length=1)
    permissions: list[PermissionEntry] = Field(default_factory=list)


class CreatedUser(BaseModel):
    id: str
    email: str
    name: str
    role: str
    permissions: list[PermissionEntry] = Field(default_factory=list)


class CreateUserResponse(BaseModel):
    success: bool = True
    user: CreatedUser


class UpdatePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=1)


class UpdateUserNameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    name: str = Field(min_length=1)


class AuthUserOut(BaseModel):
    id: str
    email: str | None = None
    user_metadata: dict = Field(default_factory=dict)


class UserUpdateResponse(BaseModel):
    success: bool = True
    user: AuthUserOut
