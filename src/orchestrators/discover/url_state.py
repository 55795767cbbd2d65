"""Read/build the ``?q=<text>&type=<category>&page=<n>`` discover URL state."""

from urllib.parse import parse_qs, urlencode, urlsplit

from src.contracts.discover_v1 import Category, SearchQuery


def parse_query_string(query_string: str) -> SearchQuery:
    """Seed a SearchQuery from a URL or bare query string.

    Unknown ``type`` values fall back to the overview tab; a missing or invalid
    ``page`` falls back to 1.
    """
    raw = (query_string or "").strip()
    if "?" in raw or "://" in raw:
        raw = urlsplit(raw).query
    params = parse_qs(raw.lstrip("?"), keep_blank_values=True)

    text = (params.get("q") or [""])[0].strip()
    category = Category.parse((params.get("type") or [None])[0])
    try:
        page = int((params.get("page") or ["1"])[0])
    except ValueError:
        page = 1
    return SearchQuery(text=text, category=category, page=max(page, 1))


def build_query_string(query: SearchQuery) -> str:
    params: dict[str, str] = {"q": query.text}
    if query.category != Category.ALL:
        params["type"] = str(query.category)
    if query.page > 1:
        params["page"] = str(query.page)
    return urlencode(params)
