# tests/test_enrich.py
import httpx
from harvester.enrich import DetailEnricher
from harvester.extract import RawListingRecord
from harvester.fetch import PageFetcher

from conftest import detail_page


def record(rating=77):
    return RawListingRecord(entry_id="a1", title="Film", url="https://catalog.test/details.php?id=a1", rating=rating)


def enricher_for(handler):
    return DetailEnricher(PageFetcher(transport=httpx.MockTransport(handler)))


def test_resolves_rating_link():
    enricher = enricher_for(lambda r: httpx.Response(200, text=detail_page("https://www.csfd.cz/film/1-x/")))
    assert enricher.enrich(record()) == "https://www.csfd.cz/film/1-x/"


def test_selector_priority():
    html = """<html><body>
      <a href="https://www.csfd.sk/film/3-sk/">sk</a>
      <a href="https://www.csfd.cz/film/2-plain/">plain</a>
      <a itemprop="sameAs" href="https://www.csfd.cz/film/1-same/">same</a>
    </body></html>"""
    enricher = enricher_for(lambda r: httpx.Response(200, text=html))
    assert enricher.enrich(record()) == "https://www.csfd.cz/film/1-same/"

    html = '<html><body><a href="https://www.csfd.sk/film/3-sk/">sk</a></body></html>'
    enricher = enricher_for(lambda r: httpx.Response(200, text=html))
    assert enricher.enrich(record()) == "https://www.csfd.sk/film/3-sk/"


def test_no_match_is_empty():
    enricher = enricher_for(lambda r: httpx.Response(200, text=detail_page()))
    assert enricher.enrich(record()) == ""


def test_failures_are_swallowed():
    def timeout(request):
        raise httpx.ConnectTimeout("slow", request=request)

    assert enricher_for(lambda r: httpx.Response(404)).enrich(record()) == ""
    assert enricher_for(timeout).enrich(record()) == ""
    assert enricher_for(lambda r: httpx.Response(200, content=b"")).enrich(record()) == ""


def test_unrated_record_is_not_fetched():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text=detail_page("https://www.csfd.cz/film/1-x/"))

    assert enricher_for(handler).enrich(record(rating=0)) == ""
    assert calls == []
