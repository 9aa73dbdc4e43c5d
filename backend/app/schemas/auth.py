from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field("", max_length=150)
    password: str = ""


class SessionOut(BaseModel):
    ok: bool = True
    username: str
    user_id: str
