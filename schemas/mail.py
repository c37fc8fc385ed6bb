from pydantic import BaseModel


class MailMessage(BaseModel):
    subject: str
    body: str
