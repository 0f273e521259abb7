"""JWT service package."""

from .jwt_utils import preview_jwt
from .token_codec import TokenCodec
