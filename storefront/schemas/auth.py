from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    full_name: str = Field(default="", alias="fullName")
    phone: str = ""

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Sifre en az 6 karakter olmalidir.")
        return v


class UserLogin(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: str
    phone: str | None = None
    is_admin: bool = False


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    """Eksik/kısa şifre 400 ile döner (handler kontrol eder), bu yüzden validator yok."""
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(default="", alias="currentPassword")
    new_password: str = Field(default="", alias="newPassword")


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(default="", alias="fullName")
    phone: str = ""


class DeleteAccountRequest(BaseModel):
    password: str = ""
