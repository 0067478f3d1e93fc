# sitebuilder/normalizers/revision.py
from sitebuilder.utils.timeutils import isoformat


def normalize_revision(revision, include_tree=True, public=False):
    data = {
        "id": revision.id,
        "pageId": revision.page_id,
        "version": revision.version,
        "createdAt": isoformat(revision.created_at),
    }

    if not public:
        data["comment"] = revision.comment
        data["createdBy"] = revision.created_by

    if include_tree:
        data["builderTree"] = revision.builder_tree

    return data
