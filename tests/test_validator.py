from sitebuilder.builder.validator import (
    ASSET,
    COLLECTION,
    PAGE_LINK,
    PAGE_PUBLISHED,
    PAGE_UNPUBLISHED,
    PRODUCT,
    ReferenceValidator,
    StaticReferenceCatalog,
    collect_references,
    find_references_to,
    normalize_link,
)


def make_tree(*children):
    return {"version": 1, "root": {"id": "root", "type": "Section", "children": list(children)}}


def catalog(**resources):
    return StaticReferenceCatalog(
        pages={"/about": PAGE_PUBLISHED, "/draft": PAGE_UNPUBLISHED},
        resources=resources,
    )


def test_valid_tree():
    tree = make_tree(
        {"id": "link", "type": "Link", "props": {"text": "About", "href": "/about?ref=nav#team"}},
        {"id": "home", "type": "Link", "props": {"href": "/"}},
        {"id": "ext", "type": "Link", "props": {"href": "https://example.com/missing"}},
        {"id": "img", "type": "Image", "props": {"src": "asset://logo"}},
    )
    result = ReferenceValidator(catalog(asset={"logo"})).validate(tree)
    assert result.valid
    assert result.errors == []
    assert result.usages == []


def test_broken_internal_link_is_an_error_with_usage():
    tree = make_tree({"id": "cta", "type": "Button", "props": {"text": "Go", "href": "/pricing"}})
    result = ReferenceValidator(catalog()).validate(tree, page_id="page-1")

    assert not result.valid
    assert len(result.errors) == 1
    usage = result.usages[0].to_dict()
    assert usage["propertyPath"] == "root.children[0].props.href"
    assert usage["nodeId"] == "cta"
    assert usage["referenceKind"] == PAGE_LINK
    assert usage["pageId"] == "page-1"
    assert result.broken_links == ["root.children[0].props.href"]


def test_link_to_unpublished_page_warns():
    tree = make_tree({"id": "l", "type": "Link", "props": {"href": "/draft/"}})
    result = ReferenceValidator(catalog()).validate(tree)
    assert result.valid
    assert len(result.warnings) == 1


def test_missing_assets_products_and_collections():
    tree = make_tree(
        {"id": "img", "type": "Image", "props": {"src": "asset://gone"}},
        {"id": "card", "type": "ProductCard", "props": {"productId": "sku-1"}},
        {"id": "list", "type": "CollectionList", "props": {"collectionId": "posts"}},
        {
            "id": "hero",
            "type": "Section",
            "style": {"base": {}, "mobile": {"backgroundImage": "/media/hero.jpg"}},
        },
    )
    result = ReferenceValidator(catalog(collection={"posts"})).validate(tree)

    kinds = sorted((u.reference_kind, u.property_path) for u in result.usages)
    assert kinds == [
        (ASSET, "root.children[0].props.src"),
        (ASSET, "root.children[3].style.mobile.backgroundImage"),
        (PRODUCT, "root.children[1].props.productId"),
    ]


def test_action_references_are_checked():
    tree = make_tree({
        "id": "btn",
        "type": "Button",
        "actions": [
            {"event": "onClick", "action": {"type": "navigate", "to": "/nowhere"}},
            {"event": "click", "action": "addToCart", "params": {"productId": "sku-9"}},
        ],
    })
    result = ReferenceValidator(catalog()).validate(tree)
    paths = [u.property_path for u in result.usages]
    assert paths == [
        "root.children[0].actions[0].params.to",
        "root.children[0].actions[1].params.productId",
    ]


def test_structure_problems_are_warnings_except_duplicate_ids():
    tree = make_tree(
        {"id": "x", "type": "HologramCarousel"},
        {"id": "t", "type": "Text", "children": [{"id": "inner", "type": "Text"}]},
        {"type": "Text"},
        {"id": "x", "type": "Text"},
    )
    result = ReferenceValidator(catalog()).validate(tree)

    assert result.errors == ["Duplicate node id x"]
    assert any("Unknown component type HologramCarousel" in w for w in result.warnings)
    assert any("cannot have children" in w for w in result.warnings)
    assert any("Malformed node" in w for w in result.warnings)


def test_empty_tree_is_valid():
    result = ReferenceValidator(catalog()).validate(None)
    assert result.to_dict() == {"valid": True, "errors": [], "warnings": [], "usages": []}


def test_collect_and_find_references():
    tree = make_tree(
        {"id": "a", "type": "Link", "props": {"href": "/about/"}},
        {"id": "b", "type": "Text", "actions": [{"event": "click", "action": "navigatePage", "params": {"pageSlug": "about"}}]},
        {"id": "c", "type": "Form", "actions": [{"event": "submit", "action": "submitForm", "params": {"collection": "leads"}}]},
    )
    refs = collect_references(tree)
    assert [(r.kind, r.node_id) for r in refs] == [(PAGE_LINK, "a"), (PAGE_LINK, "b"), (COLLECTION, "c")]
    assert [r.node_id for r in find_references_to(tree, PAGE_LINK, "/about")] == ["a", "b"]


def test_normalize_link():
    assert normalize_link("/about/?x=1") == "/about"
    assert normalize_link("/#top") == "/"


def test_deeply_nested_tree_is_validated():
    node = {"id": "img", "type": "Image", "props": {"src": "asset://missing"}}
    for i in range(3000):
        node = {"id": f"c{i}", "type": "Container", "children": [node]}

    result = ReferenceValidator(catalog()).validate(make_tree(node))
    assert not result.valid
    assert [u.node_id for u in result.usages] == ["img"]
