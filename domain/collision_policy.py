"""Policy applied when a write targets an identifier that is already taken."""

from enum import Enum


class CollisionPolicy(str, Enum):
    # Compare digests first: identical content is skipped, different content is refused.
    REJECT = "reject"
    # Write unconditionally; a differing digest is only logged.
    OVERWRITE = "overwrite"
