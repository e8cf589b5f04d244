from typing import Optional

from pydantic import BaseModel


class WelcomeEmailRequest(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None


class EmailSentResponse(BaseModel):
    success: bool = True
    message_id: Optional[str] = None
