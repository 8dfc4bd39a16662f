from pydantic import BaseModel, Field


class AdminLoginIn(BaseModel):
    passphrase: str = Field(..., min_length=1)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
