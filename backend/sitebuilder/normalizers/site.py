# sitebuilder/normalizers/site.py
from sitebuilder.utils.timeutils import isoformat


def normalize_site(site):
    return {
        "id": site.id,
        "workspaceId": site.tenant_id,
        "name": site.name,
        "slug": site.slug,
        "customDomain": site.custom_domain,
        "isPublished": bool(site.is_published),
        "publishedAt": isoformat(site.published_at),
        "createdAt": isoformat(site.created_at),
    }


def normalize_domain(domain):
    return {
        "id": domain.id,
        "siteId": domain.site_id,
        "domain": domain.domain,
        "status": domain.status,
        "isPrimary": bool(domain.is_primary),
        "verificationToken": domain.verification_token,
        "verifiedAt": isoformat(domain.verified_at),
    }
