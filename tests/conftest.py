# tests/conftest.py
import pytest
from harvester.db import init_db, make_engine, make_session_factory


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'harvester-test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def listing_cell(entry_id, title, category="Filmy CZ/SK dabing", size="6.9 GB",
                 date="02/07/2025", seeds=12, leeches=3, image=True):
    image_html = (
        f'<a href="details.php?name=x&amp;id={entry_id}">'
        f'<img class="lozad" data-src="https://img.test/{entry_id}.jpg"></a><br>'
        if image else ""
    )
    category_html = (
        f'<a href="torrents_v2.php?category=1">{category}</a><br>' if category else ""
    )
    return f"""
    <td class="lista">
      {image_html}
      {category_html}
      <a href="details.php?name=x&amp;id={entry_id}">{title}</a><br>
      Velkost {size} | Pridany {date}<br>
      Odosielaju : {seeds}<br>
      Stahuju : {leeches}
    </td>"""


def catalog_page(*cells):
    body = "".join(f"<tr>{cell}</tr>" for cell in cells)
    return f"<html><body><table>{body}</table></body></html>"


def detail_page(rating_href=None):
    link = f'<a itemprop="sameAs" href="{rating_href}">CSFD</a>' if rating_href else ""
    return f"<html><body><div class='info'>{link}</div></body></html>"
