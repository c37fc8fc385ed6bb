from pydantic import BaseModel
from typing import Optional

REQUIRED_APPLICATION_FIELDS = ('description', 'email', 'hr_name', 'organization', 'phone', 'role')


class ApplicationCreate(BaseModel):
    # Fields are optional here so missing values produce a 400 with our own message
    description: Optional[str] = None
    email: Optional[str] = None
    hr_name: Optional[str] = None
    organization: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    salary: Optional[str] = None

    def missing_fields(self):
        return [name for name in REQUIRED_APPLICATION_FIELDS if not getattr(self, name)]
