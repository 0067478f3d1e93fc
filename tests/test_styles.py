from sitebuilder.builder.styles import inline_style, resolve, style_classes


def test_tokens_map_to_classes():
    classes = style_classes({
        "padding": "md",
        "backgroundColor": "primary",
        "fontSize": "2xl",
        "display": "none",
        "gridColumns": 3,
    })
    assert classes == ["p-4", "bg-primary", "text-2xl", "hidden", "grid-cols-3"]


def test_unknown_keys_and_values_are_dropped():
    assert style_classes({"padding": "13px", "position": "fixed", "gridColumns": True}) == []


def test_inline_style_only_accepts_validated_sizes():
    assert inline_style({"width": "320px", "height": "calc(100% - 1px)"}) == "width: 320px"


def test_background_image_is_sanitized():
    assert inline_style({"backgroundImage": "/img/hero.png"}) == "background-image: url('/img/hero.png')"
    assert inline_style({"backgroundImage": "javascript:alert(1)"}) == ""
    assert inline_style({"backgroundImage": "/x.png');color:red;('"}) == ""


def test_resolve():
    assert resolve({"margin": "sm", "minHeight": "50vh"}) == {"class": "m-2", "style": "min-height: 50vh"}
