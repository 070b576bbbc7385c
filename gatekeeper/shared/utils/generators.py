"""ID generators for persisted rows (custom roles, assignments, audit entries)."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Used for custom role ids, role assignment ids, and audit entry ids;
    platform ids (users, native roles, guilds) are snowflakes supplied by
    callers and never generated here.

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result
