"""
Tests for validity checks, output placement and HTML rendering.
"""

from pathlib import Path

import pytest

from gallery_tagger.gallery import (
    is_valid,
    make_entry,
    place_output,
    relative_src,
    render_gallery,
    safe_name,
    write_gallery,
)
from gallery_tagger.models import GalleryEntry, TagResult


def camaro(**overrides):
    fields = {"year": "1969", "make": "Chevrolet", "model": "Camaro", "description": "A classic muscle car."}
    fields.update(overrides)
    return TagResult(**fields)


@pytest.mark.parametrize("make, model", [
    ("", "Camaro"),
    ("Chevrolet", ""),
    ("", ""),
    ("unknown", "Camaro"),
    ("UNKNOWN", "Camaro"),
    ("Chevrolet", "vehicle"),
    ("Chevrolet", "Vehicle"),
    ("   ", "Camaro"),
])
def test_invalid_results(make, model):
    assert not is_valid(camaro(make=make, model=model))


def test_valid_results():
    assert is_valid(camaro())
    assert is_valid(camaro(year=""))
    # the sentinels only count in their own field
    assert is_valid(camaro(make="Vehicle Co", model="Unknown"))


@pytest.mark.parametrize("value, expected", [
    ("Chevrolet", "chevrolet"),
    ("Mercedes-Benz", "mercedes_benz"),
    ("  Model T (Touring)  ", "model_t_touring"),
    ("Citroën DS", "citro_n_ds"),
    ("", ""),
])
def test_safe_name(value, expected):
    assert safe_name(value) == expected


def test_place_output_never_overwrites(tmp_path):
    source = tmp_path / "IMG_0001.JPG"
    source.write_bytes(b"first")
    out = tmp_path / "out"

    seen = []
    for _ in range(3):
        seen.append(place_output(source, camaro(), out))

    assert [path.name for path in seen] == [
        "chevrolet_camaro_1969.JPG",
        "chevrolet_camaro_1969_1.JPG",
        "chevrolet_camaro_1969_2.JPG",
    ]
    assert source.exists()
    assert all(path.read_bytes() == b"first" for path in seen)


def test_place_output_skips_existing_file(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    existing = out / "chevrolet_camaro_1969.jpg"
    existing.write_bytes(b"keep me")
    source = tmp_path / "new.jpg"
    source.write_bytes(b"new")

    dest = place_output(source, camaro(), out)

    assert dest.name == "chevrolet_camaro_1969_1.jpg"
    assert existing.read_bytes() == b"keep me"


def test_relative_src(tmp_path):
    image = tmp_path / "images" / "processed_gallery" / "chevrolet_camaro_1969.jpg"
    html = tmp_path / "images" / "gallery.html"
    assert relative_src(image, html) == "processed_gallery/chevrolet_camaro_1969.jpg"


def test_render_gallery_escapes_attributes(tmp_path):
    entry = make_entry(
        camaro(description='The "Z/28" <special> edition'),
        tmp_path / "processed_gallery" / "chevrolet_camaro_1969.jpg",
        tmp_path / "gallery.html",
    )

    html = render_gallery([entry])

    assert html.startswith('<section id="gallery"')
    assert 'data-year="1969" data-make="Chevrolet" data-model="Camaro"' in html
    assert 'data-desc="The &#34;Z/28&#34; &lt;special&gt; edition"' in html
    assert '<h5 class="card-title">1969 Chevrolet Camaro</h5>' in html
    assert 'alt="1969 Chevrolet Camaro"' in html
    assert 'src="processed_gallery/chevrolet_camaro_1969.jpg"' in html


def test_render_gallery_keeps_order():
    entries = [
        GalleryEntry(year="1969", make="Chevrolet", model="Camaro", image_path=Path("b.jpg")),
        GalleryEntry(year="1965", make="Ford", model="Mustang", image_path=Path("a.jpg")),
    ]

    html = render_gallery(entries)

    assert html.count('class="col-md-6 col-lg-4 gallery-item"') == 2
    assert html.index("Camaro") < html.index("Mustang")


def test_write_gallery_overwrites(tmp_path):
    html_path = tmp_path / "site" / "gallery.html"
    html_path.parent.mkdir()
    html_path.write_text("old content")

    write_gallery([], html_path)

    content = html_path.read_text(encoding="utf-8")
    assert "old content" not in content
    assert "gallery-item" not in content
    assert "Vehicle Gallery" in content
