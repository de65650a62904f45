from pydantic import BaseModel, Field, validator
from typing import Optional


# OTP Request (field names match the porting form payload)
class OTPRequest(BaseModel):
    number: str = Field(default="", alias="Number")
    lsp: str = Field(default="", alias="LSP")
    order_ref: str = Field(default="", alias="OR")

    @validator('number', 'lsp', 'order_ref', pre=True)
    def strip_fields(cls, v):
        return "" if v is None else str(v).strip()

    class Config:
        populate_by_name = True


# OTP Verify - accepts "code" or "Code"
class OTPVerify(BaseModel):
    number: str = Field(default="", alias="Number")
    code: Optional[str] = None
    Code: Optional[str] = None

    @validator('number', 'code', 'Code', pre=True)
    def strip_fields(cls, v):
        return "" if v is None else str(v).strip()

    @property
    def supplied_code(self) -> str:
        return self.code or self.Code or ""

    class Config:
        populate_by_name = True
