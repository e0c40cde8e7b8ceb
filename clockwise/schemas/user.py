# clockwise/schemas/user.py
from pydantic import BaseModel, EmailStr
from typing import Optional


class NewUser(BaseModel):
    full_name: str
    email: EmailStr
    role: str
    phone: Optional[str] = None
    department_id: Optional[str] = None
    is_active: bool = True
