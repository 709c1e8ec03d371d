"""
auth/guard.py -- Ownership-or-admin authorization rule for product writes.

Used identically by update and delete. Never used for create (no prior owner)
or for reads (the product list is global). Callers must confirm the resource
exists before asking, so a missing resource is always a 404, never a 403.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from auth.models import Identity


def can_mutate(identity: Identity, resource_owner_id: int | None) -> bool:
    """Return True if identity may modify a resource owned by resource_owner_id.

    An ownerless resource (owner row gone, user_id NULL) is admin-only.
    """
    if identity.is_admin:
        return True
    return resource_owner_id is not None and identity.user_id == resource_owner_id
