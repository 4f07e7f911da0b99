from __future__ import annotations

import pytest
from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from conftest import open_package, read_xml, relationships
from slidepack import (
    Chart,
    ChartKind,
    Compression,
    Dimension,
    ErrorKind,
    Hyperlink,
    Image,
    Media,
    PackageError,
    PackageOptions,
    Presentation,
    Series,
    Shape,
    ShapeType,
    Slide,
    SlideLayout,
    SlideShowSettings,
    VideoFormat,
    blank_presentation,
    validate_package,
)
from slidepack.package import write_archive
from slidepack.relationships import CT_NS, resolve_target, rels_part_name

P_NS = "http://schemas.openxmlformats.org/presentationml/2006/main"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"


def bar_chart(title: str = "Sales") -> Chart:
    return (
        Chart.new(ChartKind.BAR, title)
        .with_categories(["Q1", "Q2"])
        .add_series(Series.of("2024", [100, 150]))
    )


def test_single_blank_slide_has_centered_title() -> None:
    data = blank_presentation("Hello").to_bytes()
    archive = open_package(data)

    root = read_xml(archive, "ppt/slides/slide1.xml")
    ph = root.find(f".//{{{P_NS}}}ph")
    assert ph.get("type") == "ctrTitle"
    assert [t.text for t in root.iter(f"{{{A_NS}}}t")] == ["Hello"]

    names = archive.namelist()
    assert names[:4] == [
        "[Content_Types].xml",
        "_rels/.rels",
        "ppt/_rels/presentation.xml.rels",
        "ppt/presentation.xml",
    ]
    assert sum(1 for n in names if n.startswith("ppt/slideLayouts/slideLayout")) == 11
    assert sum(1 for n in names if n.startswith("ppt/slideLayouts/_rels/")) == 11
    assert sum(1 for n in names if n.startswith("ppt/tags/")) == 55
    for name in ("ppt/slideMasters/slideMaster1.xml", "ppt/theme/theme1.xml", "docProps/core.xml", "docProps/app.xml"):
        assert name in names
    # 11 fixed parts, 11 layouts with their rels, 55 layout tags
    assert len(names) == 88


def test_notes_slide_and_notes_master_relationship() -> None:
    pres = Presentation(title="Deck").add_slides([
        Slide(title="One"),
        Slide(title="Two").set_notes("remember"),
    ])
    archive = open_package(pres.to_bytes())

    assert "ppt/notesSlides/notesSlide2.xml" in archive.namelist()
    assert "ppt/notesSlides/notesSlide1.xml" not in archive.namelist()
    notes = read_xml(archive, "ppt/notesSlides/notesSlide2.xml")
    assert "remember" in [t.text for t in notes.iter(f"{{{A_NS}}}t")]

    pres_rels = relationships(archive, "ppt/_rels/presentation.xml.rels")
    assert [r["Type"] for r in pres_rels].count(RT.NOTES_MASTER) == 1
    slide2_rels = relationships(archive, "ppt/slides/_rels/slide2.xml.rels")
    assert [r["Type"] for r in slide2_rels].count(RT.NOTES_SLIDE) == 1
    assert "ppt/theme/theme2.xml" in archive.namelist()


def test_single_chart_parts_and_slide_relationships() -> None:
    pres = Presentation().add_slide(Slide(title="Chart").add_chart(bar_chart()))
    archive = open_package(pres.to_bytes())
    names = archive.namelist()

    for name in (
        "ppt/charts/chart1.xml",
        "ppt/charts/style1.xml",
        "ppt/charts/colors1.xml",
        "ppt/embeddings/chart1_data.xlsx",
        "ppt/charts/_rels/chart1.xml.rels",
    ):
        assert name in names

    chart_xml = archive.read("ppt/charts/chart1.xml").decode("utf-8")
    assert "Sheet1!$A$2:$A$3" in chart_xml
    assert "Sheet1!$B$2:$B$3" in chart_xml

    rels = relationships(archive, "ppt/slides/_rels/slide1.xml.rels")
    assert [(r["Id"], r["Type"]) for r in rels] == [
        ("rId1", RT.SLIDE_LAYOUT),
        ("rId2", RT.CHART),
        ("rId3", RT.PACKAGE),
    ]
    assert rels[1]["Target"] == "../charts/chart1.xml"
    assert rels[2]["Target"] == "../embeddings/chart1_data.xlsx"


def test_charts_are_numbered_across_slides() -> None:
    pres = Presentation().add_slides([
        Slide(title="A").add_chart(bar_chart("A")),
        Slide(title="B").add_chart(bar_chart("B")),
    ])
    archive = open_package(pres.to_bytes())

    targets = [r["Target"] for r in relationships(archive, "ppt/slides/_rels/slide2.xml.rels")]
    assert "../charts/chart2.xml" in targets
    assert "../embeddings/chart2_data.xlsx" in targets
    assert "Sheet2!$A$2:$A$3" in archive.read("ppt/charts/chart2.xml").decode("utf-8")


def test_chart_and_workbook_relationship_counts_match_charts() -> None:
    slide = Slide(title="Two charts").add_chart(bar_chart()).add_chart(bar_chart("Other"))
    archive = open_package(Presentation().add_slide(slide).to_bytes())
    types = [r["Type"] for r in relationships(archive, "ppt/slides/_rels/slide1.xml.rels")]
    assert types.count(RT.CHART) == 2
    assert types.count(RT.PACKAGE) == 2


def test_shape_dimensions_resolve_against_slide_extent() -> None:
    shape = Shape(ShapeType.RECTANGLE, Dimension.ratio(0.5), Dimension.inches(1.0), Dimension.ratio(0.5), Dimension.inches(1.0))
    archive = open_package(Presentation().add_slide(Slide(layout=SlideLayout.BLANK).add_shape(shape)).to_bytes())

    root = read_xml(archive, "ppt/slides/slide1.xml")
    off = root.find(f".//{{{P_NS}}}sp/{{{P_NS}}}spPr/{{{A_NS}}}xfrm/{{{A_NS}}}off")
    ext = root.find(f".//{{{P_NS}}}sp/{{{P_NS}}}spPr/{{{A_NS}}}xfrm/{{{A_NS}}}ext")
    assert (off.get("x"), off.get("y")) == ("4572000", "914400")
    assert (ext.get("cx"), ext.get("cy")) == ("4572000", "914400")


def rich_presentation(png_file) -> Presentation:
    link = Hyperlink.url("https://example.com/a?b=1&c=2")
    return (
        Presentation(title="Everything")
        .add_slide(
            Slide(title="Cover", layout=SlideLayout.CENTERED_TITLE).set_notes("intro")
        )
        .add_slide(
            Slide(title="Body")
            .add_bullets(["one", "two"])
            .add_shape(Shape(ShapeType.ELLIPSE, 0, 0, 914400, 914400).with_text("go").with_hyperlink(link))
            .add_shape(Shape(ShapeType.RECTANGLE, 0, 0, 914400, 914400).with_hyperlink(Hyperlink.to_slide(1)))
            .add_chart(bar_chart())
            .add_image(Image.from_file(png_file))
            .add_media(Media.from_bytes(b"\x00" * 32, VideoFormat.MP4))
        )
        .with_slide_show(SlideShowSettings(loop=True))
    )


def test_every_relationship_target_exists(png_file) -> None:
    archive = open_package(rich_presentation(png_file).to_bytes())
    present = set(archive.namelist())

    for rels_name in (n for n in archive.namelist() if n.endswith(".rels")):
        directory, _, filename = rels_name.rpartition("_rels/")
        source = directory + filename[: -len(".rels")]
        for rel in relationships(archive, rels_name):
            if rel.get("TargetMode") == "External":
                continue
            assert resolve_target(source, rel["Target"]) in present, (rels_name, rel)


def test_every_part_has_exactly_one_content_type_rule(png_file) -> None:
    archive = open_package(rich_presentation(png_file).to_bytes())
    types = read_xml(archive, "[Content_Types].xml")
    defaults = {d.get("Extension") for d in types.iter(f"{{{CT_NS}}}Default")}
    overrides = [o.get("PartName") for o in types.iter(f"{{{CT_NS}}}Override")]
    assert len(overrides) == len(set(overrides))

    for name in archive.namelist():
        if name == "[Content_Types].xml" or name.endswith(".rels"):
            continue
        extension = name.rsplit(".", 1)[-1].lower()
        matches = ("/" + name in overrides) + (extension in defaults and "/" + name not in overrides)
        assert matches == 1, name


def test_rich_presentation_validates_cleanly(png_file) -> None:
    assert validate_package(rich_presentation(png_file).to_bytes()) == []


def test_media_parts_and_relationships(png_file) -> None:
    archive = open_package(rich_presentation(png_file).to_bytes())
    names = archive.namelist()
    assert "ppt/media/photo.png" in names
    assert "ppt/media/media1.mp4" in names
    assert "ppt/media/image1.png" in names

    rels = relationships(archive, "ppt/slides/_rels/slide2.xml.rels")
    types = [r["Type"] for r in rels]
    assert types[:4] == [RT.SLIDE_LAYOUT, RT.CHART, RT.PACKAGE, RT.IMAGE]
    assert types[4:7] == [RT.MEDIA, RT.VIDEO, RT.IMAGE]
    assert types[7:9] == [RT.HYPERLINK, RT.SLIDE]
    external = [r for r in rels if r["Type"] == RT.HYPERLINK]
    assert external[0]["TargetMode"] == "External"
    assert external[0]["Target"] == "https://example.com/a?b=1&c=2"


def test_pres_props_follow_notes_master_relationship(png_file) -> None:
    archive = open_package(rich_presentation(png_file).to_bytes())
    types = [r["Type"] for r in relationships(archive, "ppt/_rels/presentation.xml.rels")]
    assert types[-2:] == [RT.NOTES_MASTER, RT.PRES_PROPS]
    assert b'loop="1"' in archive.read("ppt/presProps.xml")


def test_same_disk_image_twice_gets_suffixed_name(png_file) -> None:
    slide = Slide(title="Twice").add_image(Image.from_file(png_file)).add_image(Image.from_file(png_file))
    names = open_package(Presentation().add_slide(slide).to_bytes()).namelist()
    assert "ppt/media/photo.png" in names
    assert "ppt/media/photo_2.png" in names


def test_serialization_is_deterministic() -> None:
    pres = Presentation(title="Same").add_slides([
        Slide(title="A").add_bullets(["x", "y"]).set_notes("n"),
        Slide(title="B", layout=SlideLayout.TWO_COLUMN).add_bullets(["1", "2", "3"]),
    ])
    assert pres.to_bytes() == pres.to_bytes()
    stored = pres.to_bytes(PackageOptions(compression=Compression.STORE))
    assert stored == pres.to_bytes(PackageOptions(compression=Compression.STORE))
    assert stored != pres.to_bytes()


def test_link_to_missing_slide_is_rejected() -> None:
    shape = Shape(ShapeType.RECTANGLE, 0, 0, 100, 100).with_hyperlink(Hyperlink.to_slide(5))
    pres = Presentation().add_slide(Slide(title="Only").add_shape(shape))
    with pytest.raises(PackageError, match="links to slide 5") as excinfo:
        pres.to_bytes()
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT


def test_strict_mode_rejects_control_characters() -> None:
    pres = Presentation().add_slide(Slide(title="bad\x01title"))
    with pytest.raises(PackageError, match="U\\+0001"):
        pres.to_bytes(PackageOptions(strict=True))

    archive = open_package(pres.to_bytes())
    assert "bad\ufffdtitle".encode("utf-8") in archive.read("ppt/slides/slide1.xml")


def test_missing_image_file_is_not_found(tmp_path) -> None:
    pres = Presentation().add_slide(Slide(title="x").add_image(Image.from_file(tmp_path / "nope.png")))
    with pytest.raises(PackageError) as excinfo:
        pres.to_bytes()
    assert excinfo.value.kind is ErrorKind.NOT_FOUND


def test_too_many_entries_overflow() -> None:
    entries = [(f"part{i}.xml", b"") for i in range(0x10000)]
    with pytest.raises(PackageError) as excinfo:
        write_archive(entries)
    assert excinfo.value.kind is ErrorKind.PACKAGE_OVERFLOW


def test_save_writes_file_atomically(tmp_path) -> None:
    target = tmp_path / "out" / "deck.pptx"
    written = blank_presentation("Saved", 2).save(target)
    assert written == target
    assert validate_package(target) == []
    assert [p.name for p in target.parent.iterdir()] == ["deck.pptx"]


def test_language_from_options_reaches_runs() -> None:
    data = blank_presentation("Hallo").to_bytes(PackageOptions(language="de-DE"))
    slide = open_package(data).read("ppt/slides/slide1.xml")
    assert b'lang="de-DE" altLang="en-US"' in slide


def test_rels_part_name_for_root_and_nested_parts() -> None:
    assert rels_part_name("") == "_rels/.rels"
    assert rels_part_name("ppt/slides/slide3.xml") == "ppt/slides/_rels/slide3.xml.rels"


def charts_and_notes_presentation() -> Presentation:
    return Presentation(title="Ordered").add_slides([
        Slide(title="Numbers").add_chart(bar_chart("A")).add_chart(bar_chart("B")).set_notes("two charts"),
        Slide(title="Wrap up").set_notes("thanks"),
    ])


def test_archive_entries_follow_the_fixed_part_order() -> None:
    names = open_package(charts_and_notes_presentation().to_bytes()).namelist()

    chart_parts = []
    for g in (1, 2):
        chart_parts += [
            f"ppt/charts/chart{g}.xml",
            f"ppt/charts/style{g}.xml",
            f"ppt/charts/colors{g}.xml",
            f"ppt/charts/_rels/chart{g}.xml.rels",
            f"ppt/embeddings/chart{g}_data.xlsx",
        ]
    layout_parts = []
    for n in range(1, 12):
        layout_parts += [f"ppt/slideLayouts/slideLayout{n}.xml", f"ppt/slideLayouts/_rels/slideLayout{n}.xml.rels"]

    expected = [
        "[Content_Types].xml",
        "_rels/.rels",
        "ppt/_rels/presentation.xml.rels",
        "ppt/presentation.xml",
        "ppt/slides/slide1.xml",
        "ppt/notesSlides/notesSlide1.xml",
        "ppt/slides/slide2.xml",
        "ppt/notesSlides/notesSlide2.xml",
        "ppt/slides/_rels/slide1.xml.rels",
        "ppt/slides/_rels/slide2.xml.rels",
        *chart_parts,
        "ppt/notesSlides/_rels/notesSlide1.xml.rels",
        "ppt/notesSlides/_rels/notesSlide2.xml.rels",
        "ppt/notesMasters/notesMaster1.xml",
        "ppt/notesMasters/_rels/notesMaster1.xml.rels",
        "ppt/theme/theme2.xml",
        *layout_parts,
        "ppt/slideMasters/slideMaster1.xml",
        "ppt/slideMasters/_rels/slideMaster1.xml.rels",
        "ppt/theme/theme1.xml",
        "docProps/core.xml",
        "docProps/app.xml",
    ]
    assert [n for n in names if not n.startswith("ppt/tags/")] == expected


def test_notes_relationship_comes_after_charts_and_workbooks() -> None:
    archive = open_package(charts_and_notes_presentation().to_bytes())
    rels = relationships(archive, "ppt/slides/_rels/slide1.xml.rels")

    assert [(r["Id"], r["Type"]) for r in rels] == [
        ("rId1", RT.SLIDE_LAYOUT),
        ("rId2", RT.CHART),
        ("rId3", RT.CHART),
        ("rId4", RT.PACKAGE),
        ("rId5", RT.PACKAGE),
        ("rId6", RT.NOTES_SLIDE),
    ]
    assert [r["Target"] for r in rels[1:]] == [
        "../charts/chart1.xml",
        "../charts/chart2.xml",
        "../embeddings/chart1_data.xlsx",
        "../embeddings/chart2_data.xlsx",
        "../notesSlides/notesSlide1.xml",
    ]
    # a notes-only slide still puts its notes right after the layout
    assert [r["Type"] for r in relationships(archive, "ppt/slides/_rels/slide2.xml.rels")] == [
        RT.SLIDE_LAYOUT,
        RT.NOTES_SLIDE,
    ]


P14_NS = "http://schemas.microsoft.com/office/powerpoint/2010/main"


def test_sections_reuse_presentation_slide_ids() -> None:
    pres = (
        blank_presentation("Sections", 3)
        .add_section("Body", 1, 2)
        .add_section("Intro & Welcome", 0, 1)
    )
    root = read_xml(open_package(pres.to_bytes()), "ppt/presentation.xml")

    slide_ids = [el.get("id") for el in root.iter(f"{{{P_NS}}}sldId")]
    assert slide_ids == ["256", "257", "258"]

    sections = list(root.iter(f"{{{P14_NS}}}section"))
    assert [s.get("name") for s in sections] == ["Intro & Welcome", "Body"]
    assert [[el.get("id") for el in s.iter(f"{{{P14_NS}}}sldId")] for s in sections] == [["256"], ["257", "258"]]
    assert len({s.get("id") for s in sections}) == 2
    assert all(s.get("id").startswith("{") and s.get("id").endswith("}") for s in sections)

    ext = root[-1]
    assert ext.tag == f"{{{P_NS}}}extLst"
    assert ext[0].get("uri") == "{521415D9-36F7-43E2-AB2F-B90AF26B5E84}"


def test_presentation_without_sections_has_no_extension_list() -> None:
    root = read_xml(open_package(blank_presentation("Plain").to_bytes()), "ppt/presentation.xml")
    assert root.find(f"{{{P_NS}}}extLst") is None


def test_section_members_past_the_last_slide_are_skipped() -> None:
    pres = blank_presentation("Short", 2).add_section("All", 0, 5)
    root = read_xml(open_package(pres.to_bytes()), "ppt/presentation.xml")
    assert [el.get("id") for el in root.iter(f"{{{P14_NS}}}sldId")] == ["256", "257"]


@pytest.mark.parametrize(
    "sections, message",
    [
        ([("Intro", 0, 2), ("Overlap", 1, 2)], "overlaps 'Intro'"),
        ([("  ", 0, 1)], "section name is empty"),
        ([("Back", -1, 1)], "negative first slide"),
    ],
)
def test_invalid_sections_are_rejected_when_building(sections, message) -> None:
    pres = blank_presentation("Bad", 3)
    for name, first, count in sections:
        pres = pres.add_section(name, first, count)
    with pytest.raises(PackageError) as excinfo:
        pres.to_bytes()
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT
    assert message in str(excinfo.value)
