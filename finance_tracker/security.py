from werkzeug.security import generate_password_hash, check_password_hash

from .errors import HashingError

DEFAULT_ITERATIONS = 600000
MIN_ITERATIONS = 1000


def hash_password(plaintext, iterations=DEFAULT_ITERATIONS):
    """Return a self-salted PBKDF2-SHA256 digest of ``plaintext``.

    The digest has the form ``pbkdf2:sha256:<iterations>$<salt>$<hash>`` so it
    can be verified later without storing the salt anywhere else.
    """
    if not isinstance(plaintext, str) or not plaintext:
        raise HashingError('Password must be a non-empty string')
    if iterations < MIN_ITERATIONS:
        raise HashingError('Refusing to hash with fewer than %d iterations' % MIN_ITERATIONS)
    try:
        return generate_password_hash(plaintext, method='pbkdf2:sha256:%d' % iterations, salt_length=16)
    except (TypeError, ValueError) as e:
        raise HashingError() from e


def verify_password(plaintext, digest):
    if not isinstance(plaintext, str) or not isinstance(digest, str):
        return False
    try:
        return check_password_hash(digest, plaintext)
    except ValueError:
        # digest names a method werkzeug does not know
        return False


class PasswordHasher:
    def __init__(self, iterations=DEFAULT_ITERATIONS):
        if iterations < MIN_ITERATIONS:
            raise ValueError('PASSWORD_HASH_ITERATIONS must be at least %d' % MIN_ITERATIONS)
        self.iterations = iterations

    def hash(self, plaintext):
        return hash_password(plaintext, self.iterations)

    def verify(self, plaintext, digest):
        return verify_password(plaintext, digest)
