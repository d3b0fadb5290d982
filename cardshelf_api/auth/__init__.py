"""
Identity resolution and authorization.

- verifier.py: bearer-token verification through a TokenProvider
- providers.py: JWKS (RS256) and shared-secret (HS256) token providers
- materializer.py: upsert-on-login of user records
- resolver.py: effective-owner resolution for read requests
"""
from .errors import (
    HandleNotFound,
    InvalidOrExpiredToken,
    MalformedHeader,
    OwnerNotFound,
    ProviderUnavailable,
    TemplateOwnerMissing,
    VerificationError,
)
from .identity import Anonymous, Authenticated, AuthenticationOutcome, Claims
from .materializer import IdentityMaterializer
from .providers import (
    JWKSTokenProvider,
    SharedSecretTokenProvider,
    TokenProvider,
    build_token_provider,
)
from .resolver import OwnerQuery, OwnerResolver, TemplateOwnerLookup
from .verifier import TokenVerifier, extract_bearer_token

__all__ = [
    "Anonymous",
    "Authenticated",
    "AuthenticationOutcome",
    "Claims",
    "HandleNotFound",
    "IdentityMaterializer",
    "InvalidOrExpiredToken",
    "JWKSTokenProvider",
    "MalformedHeader",
    "OwnerNotFound",
    "OwnerQuery",
    "OwnerResolver",
    "ProviderUnavailable",
    "SharedSecretTokenProvider",
    "TemplateOwnerLookup",
    "TemplateOwnerMissing",
    "TokenProvider",
    "TokenVerifier",
    "VerificationError",
    "build_token_provider",
    "extract_bearer_token",
]
