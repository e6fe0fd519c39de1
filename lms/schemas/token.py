from pydantic import BaseModel
from typing import Optional

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    exp: Optional[int] = None

    @property
    def user_id(self) -> Optional[int]:
        return int(self.sub) if self.sub and self.sub.isdigit() else None
