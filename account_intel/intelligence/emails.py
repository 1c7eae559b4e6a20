"""Email address helpers for internal/external classification."""


def extract_domain(email: str) -> str | None:
    """Return the lowercase domain of an address, or None if it has none."""
    _, sep, domain = email.strip().rpartition("@")
    if not sep or not domain:
        return None
    return domain.lower()


def is_internal_email(email: str, internal_domains: list[str]) -> bool:
    """Check whether an address belongs to one of our own domains."""
    domain = extract_domain(email)
    if domain is None:
        return False
    return domain in {d.lower() for d in internal_domains}


def is_external_email(email: str, internal_domains: list[str]) -> bool:
    """Check whether a string is a real address outside our domains."""
    return extract_domain(email) is not None and not is_internal_email(
        email, internal_domains
    )
