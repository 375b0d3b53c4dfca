from jose import JWTError, ExpiredSignatureError, jwt
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException
from cinema_api.utils.config import settings
import uuid

def create_access_token(payload: dict) -> str:
    # Tokens are normally issued by the identity service; this is for operators and tests.
    to_encode = payload.copy()
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    jti = str(uuid.uuid4())
    to_encode.update({
        "exp": expire,
        "iat": now,
        "jti": jti,
        "type": "access"
    })
    token = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return token

def verify_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has been expired, please login again")
    except JWTError:
        return None
