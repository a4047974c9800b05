from fastapi import Header, HTTPException
from jose import jwt
from jose.exceptions import JOSEError

from paygw_razorpay.config import JWT_SECRET
from paygw_razorpay.domain import Payer


def verify_token(authorization: str = Header(...)) -> Payer:
    """Decode the bearer token and return the buyer it identifies."""
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("unsupported scheme")
        claims = jwt.decode(token, JWT_SECRET, algorithms=["HS256"])
        return Payer(
            id=int(claims["sub"]),
            name=claims.get("name") or "",
            email=claims.get("email") or "",
            contact=claims.get("phone") or "",
        )
    except (ValueError, KeyError, TypeError, JOSEError):
        raise HTTPException(status_code=401, detail="Invalid or missing token")
