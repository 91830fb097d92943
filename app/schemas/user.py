from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True


class UserInDB(UserResponse):
    password: str
