# tests/test_extract.py
import pytest
from harvester.errors import ParseError
from harvester.extract import extract_entry_id, extract_records, parse_document

from conftest import catalog_page, listing_cell

PAGE_URL = "https://catalog.test/torrent/torrents_v2.php?active=0&page=0"


def test_extracts_qualifying_cells_only():
    html = catalog_page(
        listing_cell("aaa111", "Film X = CSFD 77%"),
        '<td class="lista">Advertisement</td>',
        '<td class="lista"><a href="details.php?id=empty">   </a></td>',
        listing_cell("bbb222", "Album Y", category=None, image=False, size="500 MB"),
    )
    records = extract_records(parse_document(html.encode()), page_url=PAGE_URL)
    assert [r.entry_id for r in records] == ["aaa111", "bbb222"]

    first, second = records
    assert first.title == "Film X = CSFD 77%"
    assert first.url == "https://catalog.test/torrent/details.php?name=x&id=aaa111"
    assert first.category == "Filmy CZ/SK dabing"
    assert first.image_url == "https://img.test/aaa111.jpg"
    assert first.size_text == "6.9 GB"
    assert first.date_text == "02/07/2025"
    assert (first.seeds, first.leeches) == (12, 3)
    assert first.rating == 77
    assert first.rating_url == ""

    assert second.category is None
    assert second.image_url is None
    assert second.size_text == "500 MB"
    assert second.rating == 0


def test_first_metadata_prefix_wins():
    cell = """<td class="lista"><a href="details.php?id=x1">T</a><br>
      Velkost 1 GB | Pridany 01/01/2024<br>Odosielaju : 4<br>Stahuju : 2<br>
      Velkost 9 GB | Pridany 09/09/2029<br>Odosielaju : 99<br>Stahuju : 98</td>"""
    record, = extract_records(parse_document(catalog_page(cell)))
    assert record.size_text == "1 GB"
    assert record.date_text == "01/01/2024"
    assert (record.seeds, record.leeches) == (4, 2)


def test_cell_without_metadata_keeps_defaults():
    cell = '<td class="lista"><a href="details.php?id=x1">Title only</a></td>'
    record, = extract_records(parse_document(catalog_page(cell)))
    assert record.size_text == ""
    assert (record.seeds, record.leeches) == (0, 0)


def test_extract_entry_id():
    assert extract_entry_id("details.php?name=abc&id=339688748bd2") == "339688748bd2"
    assert extract_entry_id("details.php?name=abc") == ""


@pytest.mark.parametrize("body", [b"", b"   \n", None])
def test_parse_document_rejects_empty(body):
    with pytest.raises(ParseError):
        parse_document(body)


def test_unparsable_href_skips_only_that_cell():
    html = catalog_page(
        listing_cell("aaa", "Good film"),
        '<td class="lista"><a href="http://[bad/details.php?id=bbb">Broken link</a></td>',
    )
    records = extract_records(parse_document(html), page_url=PAGE_URL)
    assert [r.entry_id for r in records] == ["aaa"]
