from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str
    password: str


class UserProfileResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    capabilities: list[str] = []

    class Config:
        from_attributes = True  # SQLAlchemy compatibility


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserProfileResponse
