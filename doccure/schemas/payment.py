from pydantic import BaseModel


class CouponRequest(BaseModel):
    coupon: str
    price: float


class PaymentIntentRequest(BaseModel):
    price: float


class PaymentIntentResponse(BaseModel):
    clientSecret: str
