from pydantic import BaseModel, StrictStr


class VerifyIn(BaseModel):
    code: StrictStr
