"""
Code generator - URL-safe verification and password reset codes.
"""

import secrets
import string

# 64 symbols: 6 bits of entropy per character
ALPHABET = string.ascii_letters + string.digits + "_-"

MIN_CODE_SIZE = 21


def generate_code(size: int = MIN_CODE_SIZE) -> str:
    """
    Generate a cryptographically secure opaque code.

    Uses secrets module for cryptographic randomness. The default of
    21 characters gives 126 bits of entropy.

    Raises:
        ValueError: If size is below the minimum code size
    """
    if size < MIN_CODE_SIZE:
        raise ValueError(f"Code size must be at least {MIN_CODE_SIZE}, got {size}")
    return "".join(secrets.choice(ALPHABET) for _ in range(size))
