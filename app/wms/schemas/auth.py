from pydantic import BaseModel, Field


class VerifyPasswordRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class VerifyPasswordResponse(BaseModel):
    success: bool = True
    message: str
