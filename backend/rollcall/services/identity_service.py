"""Identity assertion: verify third-party ID tokens.

Students sign in with Google. The browser hands us the raw ID token
(a JWT signed by Google with RS256) and we verify it here against the
provider's published key set before trusting any claim in it.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Callable, Iterable, Optional

import jwt
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientConnectionError

from rollcall.errors import InvalidCredential, Transient

logger = logging.getLogger(__name__)

ALGORITHMS = ['RS256']


@dataclass(frozen=True)
class Identity:
    """A verified (subject, name, email, avatar) tuple."""
    subject_id: str
    name: str
    email: str
    avatar_url: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            'subjectId': data['subject_id'],
            'name': data['name'],
            'email': data['email'],
            'avatarUrl': data['avatar_url'],
        }


class IdentityVerifier:
    """Verifies OpenID Connect ID tokens against a JSON Web Key Set.

    ``key_resolver`` maps a raw token to the public key that should have
    signed it. By default keys come from ``jwks_url`` through
    :class:`jwt.PyJWKClient`, which caches the key set between requests.
    """

    def __init__(
        self,
        audience: Optional[str],
        issuers: Iterable[str] = None,
        jwks_url: Optional[str] = None,
        timeout: int = 5,
        require_verified_email: bool = True,
        key_resolver: Callable[[str], object] = None,
        leeway: int = 30
    ):
        self.audience = audience
        self.issuers = list(issuers or [])
        self.jwks_url = jwks_url
        self.timeout = timeout
        self.require_verified_email = require_verified_email
        self.leeway = leeway
        self._jwk_client = None
        self._key_resolver = key_resolver or self._resolve_from_jwks

    def _resolve_from_jwks(self, credential: str):
        if self._jwk_client is None:
            if not self.jwks_url:
                raise InvalidCredential('Identity provider keys are not configured')
            self._jwk_client = PyJWKClient(self.jwks_url, timeout=self.timeout)
        return self._jwk_client.get_signing_key_from_jwt(credential).key

    def verify(self, credential: str) -> Identity:
        """Verify ``credential`` and return the identity it asserts.

        Raises ``InvalidCredential`` for malformed, expired, mis-addressed or
        badly signed tokens, and ``Transient`` when the key set cannot be
        fetched.
        """
        if not credential or not isinstance(credential, str):
            raise InvalidCredential('Sign-in credential is required')
        if not self.audience:
            raise InvalidCredential('Identity provider client id is not configured')

        try:
            key = self._key_resolver(credential)
            claims = jwt.decode(
                credential,
                key,
                algorithms=ALGORITHMS,
                audience=self.audience,
                leeway=self.leeway,
                options={'require': ['exp', 'iat', 'iss', 'sub', 'aud']}
            )
        except PyJWKClientConnectionError as e:
            logger.warning('Could not fetch identity provider keys: %s', e)
            raise Transient('Could not reach the sign-in provider. Please try again.')
        except jwt.ExpiredSignatureError:
            raise InvalidCredential('Your sign-in has expired. Please sign in again.')
        except jwt.PyJWTError as e:
            logger.info('Rejected identity credential: %s', e)
            raise InvalidCredential()

        if self.issuers and claims.get('iss') not in self.issuers:
            logger.info('Rejected identity credential from issuer %s', claims.get('iss'))
            raise InvalidCredential()

        email = claims.get('email')
        if not email:
            raise InvalidCredential('Your sign-in did not include an email address')
        if self.require_verified_email and claims.get('email_verified') is False:
            raise InvalidCredential('Your email address is not verified with the sign-in provider')

        return Identity(
            subject_id=str(claims['sub']),
            name=claims.get('name') or email,
            email=email,
            avatar_url=claims.get('picture')
        )
