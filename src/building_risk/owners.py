"""
Owner name resolution.

PLUTO's owner name is often a shell LLC or an outdated deed holder, so HPD
registration contacts take precedence when they name a person or a
corporation. Priority, highest first:

1. Head officer / individual owner with first and last name -> "First Last (Reg)"
2. Site manager with first and last name -> "First Last (Mgr)"
3. Corporate owner with a corporation name -> the name as registered
4. PLUTO owner name
5. "Unknown Owner"

Within each tier only the first contact of that type (in arrival order) is
considered.
"""

from typing import Mapping, Optional

from .indexing import first, lookup

UNKNOWN_OWNER = "Unknown Owner"

PRINCIPAL_TYPES = ("HeadOfficer", "IndividualOwner")
SITE_MANAGER_TYPES = ("SiteManager",)
CORPORATE_TYPES = ("CorporateOwner",)


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first_of_type(contacts, types) -> Optional[dict]:
    return next((c for c in contacts if c.get("type") in types), None)


def _person_name(contact: Optional[dict]) -> Optional[str]:
    if contact is None:
        return None
    first_name = _text(contact.get("firstname"))
    last_name = _text(contact.get("lastname"))
    if not first_name or not last_name:
        return None
    return f"{first_name} {last_name}"


def resolve_registered_owner(contacts) -> Optional[str]:
    """Pick an owner name from HPD registration contacts, or None."""
    principal = _person_name(_first_of_type(contacts, PRINCIPAL_TYPES))
    if principal:
        return f"{principal} (Reg)"

    manager = _person_name(_first_of_type(contacts, SITE_MANAGER_TYPES))
    if manager:
        return f"{manager} (Mgr)"

    corporation = _first_of_type(contacts, CORPORATE_TYPES)
    if corporation is not None and _text(corporation.get("corporationname")):
        return corporation["corporationname"]
    return None


def resolve_owner(
    bin_: Optional[str],
    bbl: Optional[str],
    pluto_by_bbl: Mapping[str, tuple],
    registrations_by_bin: Mapping[str, tuple],
    contacts_by_registration: Mapping[str, tuple],
) -> str:
    """
    Resolve the best known owner name for one building.

    Args:
        bin_: Canonical BIN of the footprint
        bbl: Canonical BBL of the footprint (may be None)
        pluto_by_bbl: PLUTO index
        registrations_by_bin: HPD registration link index
        contacts_by_registration: HPD contact index

    Returns:
        Owner name, UNKNOWN_OWNER when nothing matches
    """
    registration = first(registrations_by_bin, bin_)
    if registration is not None:
        contacts = lookup(contacts_by_registration, registration.get("registrationid"))
        registered = resolve_registered_owner(contacts)
        if registered:
            return registered

    pluto = first(pluto_by_bbl, bbl)
    if pluto is not None and _text(pluto.get("ownername")):
        return pluto["ownername"]
    return UNKNOWN_OWNER
