# sitebuilder/application/cms/custom_domains.py
import secrets

from sqlalchemy.exc import IntegrityError

from sitebuilder.application.cms.queries import get_domain, get_site
from sitebuilder.domain.exceptions import BadRequest, Conflict
from sitebuilder.extensions import db
from sitebuilder.models.custom_domain import DOMAIN_PENDING, DOMAIN_VERIFIED, CustomDomain
from sitebuilder.utils.audit import log_action
from sitebuilder.utils.domains import is_valid_domain, normalize_domain
from sitebuilder.utils.timeutils import utc_now
from sitebuilder.utils.transaction import transactional


def register_domain(*, tenant_id: str, site_id: str, actor_id: str, domain: str, platform_domain: str) -> CustomDomain:
    """
    Attach a custom domain to a site in PENDING state.

    The first domain of a site becomes its primary `custom_domain`. DNS
    verification happens elsewhere and reports back via `verify_domain`.
    """
    site = get_site(tenant_id=tenant_id, site_id=site_id)

    normalized = normalize_domain(domain)
    if not is_valid_domain(normalized):
        raise BadRequest(f"Invalid domain: {domain}")
    if normalized == platform_domain or normalized.endswith("." + platform_domain):
        raise BadRequest("Platform subdomains cannot be registered as custom domains")

    if CustomDomain.query.filter_by(domain=normalized).first():
        raise Conflict("Domain is already registered")

    record = CustomDomain()
    record.tenant_id = tenant_id
    record.site_id = site.id
    record.domain = normalized
    record.status = DOMAIN_PENDING
    record.verification_token = secrets.token_urlsafe(24)
    record.is_primary = site.custom_domain is None

    try:
        with transactional():
            db.session.add(record)
            if record.is_primary:
                site.custom_domain = normalized
            db.session.flush()

            log_action(
                action="domain.register",
                entity_type="custom_domain",
                entity_id=record.id,
                payload={"domain": normalized, "site_id": site.id, "actor_id": actor_id},
            )
    except IntegrityError as exc:
        raise Conflict("Domain is already registered") from exc

    return record


def verify_domain(*, tenant_id: str, domain_id: str, actor_id: str) -> CustomDomain:
    """Mark a domain VERIFIED. Verifying twice is a no-op."""
    record = get_domain(tenant_id=tenant_id, domain_id=domain_id)
    if record.status == DOMAIN_VERIFIED:
        return record

    with transactional():
        record.status = DOMAIN_VERIFIED
        record.verified_at = utc_now()

        log_action(
            action="domain.verify",
            entity_type="custom_domain",
            entity_id=record.id,
            payload={"domain": record.domain, "actor_id": actor_id},
        )

    return record
