from calendar import timegm
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

from .errors import TokenExpired, TokenInvalid


def utcnow():
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and validates the signed session tokens handed out at login."""

    def __init__(self, secret, ttl=timedelta(hours=1), algorithm='HS256', clock=utcnow):
        if not secret:
            raise ValueError('JWT_SECRET must be set')
        self.secret = secret
        self.ttl = ttl
        self.algorithm = algorithm
        self.clock = clock

    def issue(self, identity):
        now = self.clock()
        claims = {'sub': str(identity), 'iat': now, 'exp': now + self.ttl}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def validate(self, token):
        try:
            # expiry is checked below: jose only rejects once exp < now
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm],
                                options={'verify_exp': False})
        except (JWTError, AttributeError, TypeError) as e:
            raise TokenInvalid() from e
        expiry = claims.get('exp')
        if isinstance(expiry, bool) or not isinstance(expiry, int):
            raise TokenInvalid('Token carries no expiry')
        if timegm(self.clock().utctimetuple()) >= expiry:
            raise TokenExpired()
        identity = claims.get('sub')
        if not identity:
            raise TokenInvalid('Token carries no identity')
        return identity
